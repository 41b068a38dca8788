import logging
from typing import Union, Optional

from . import provider
from .commons import OperationFailedException, DecryptionFailedException, to_octets
from .encoding import Encoding, get_encoding
from .keys import validate_symmetric_key, resolve_iv, algorithm_for
from .padding import Padding, get_padding

logger = logging.getLogger(__name__)


class Aes:
    """AES-CBC加解密类

    密钥长度16、24、32字节分别对应AES-128/192/256，未提供IV时由密钥推导。
    构造时检查全部参数，不执行任何密码运算。
    """
    def __init__(self, secret_key: Union[str, bytes, bytearray],
                 iv: Union[str, bytes, bytearray, None] = None,
                 padding: Union[Padding, str] = 'PKCS7',
                 encoding: Optional[Union[Encoding, str]] = 'base64'):
        self._secret_key = validate_symmetric_key(secret_key)
        self._iv = resolve_iv(self._secret_key, iv)
        self._padding = get_padding(padding)
        self._encoding = get_encoding(encoding)
        self._method = algorithm_for(self._secret_key)

    @property
    def method(self) -> str:
        return self._method

    @property
    def iv(self) -> bytes:
        return self._iv

    def encrypt(self, plaintext: Union[str, bytes, bytearray, memoryview]) -> Union[str, bytes]:
        """加密并编码

        :param plaintext: 明文，字符串按UTF-8编码
        :return: 按encoding编码的密文，encoding为NONE时返回字节串
        """
        padded = self._padding.pad(to_octets(plaintext))
        cipher_text = provider.symmetric_encrypt(self._method, self._secret_key, self._iv, padded)
        return self._encoding.encode(cipher_text)

    def decrypt(self, encrypted: Union[str, bytes, bytearray, memoryview]) -> bytes:
        """解码并解密

        :param encrypted: 按encoding编码的密文
        :return: 明文字节串
        """
        try:
            cipher_text = self._encoding.decode(encrypted)
            padded = provider.symmetric_decrypt(self._method, self._secret_key, self._iv, cipher_text)
            return self._padding.unpad(padded)
        except OperationFailedException as e:
            logger.debug('%s decryption failed: %s', self._method, type(e).__name__)
            raise DecryptionFailedException('解密失败/Decryption failed') from e


def aes_encrypt(plaintext: Union[str, bytes, bytearray, memoryview],
                secret_key: Union[str, bytes, bytearray],
                iv: Union[str, bytes, bytearray, None] = None,
                padding: Union[Padding, str] = 'PKCS7',
                encoding: Optional[Union[Encoding, str]] = 'base64') -> Union[str, bytes]:
    """AES-CBC加密函数，适用于一次性加密的情况"""
    return Aes(secret_key, iv, padding, encoding).encrypt(plaintext)


def aes_decrypt(encrypted: Union[str, bytes, bytearray, memoryview],
                secret_key: Union[str, bytes, bytearray],
                iv: Union[str, bytes, bytearray, None] = None,
                padding: Union[Padding, str] = 'PKCS7',
                encoding: Optional[Union[Encoding, str]] = 'base64') -> bytes:
    """AES-CBC解密函数，适用于一次性解密的情况"""
    return Aes(secret_key, iv, padding, encoding).decrypt(encrypted)
