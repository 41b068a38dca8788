import logging
from enum import Enum, IntEnum
from typing import Union, Optional

from . import provider
from .commons import (OperationFailedException, DecryptionFailedException, UnsupportedPaddingException,
                      UnsupportedAlgorithmException, ProviderFailureException, to_octets)
from .encoding import Encoding, get_encoding
from .keys import KeyMaterial, resolve_public_key, resolve_private_key

logger = logging.getLogger(__name__)


class PublicEncryptPadding(IntEnum):
    """公钥加密/私钥解密可用的填充方式，取值与OpenSSL常量相同"""
    PKCS1 = provider.RSA_PKCS1_PADDING
    SSLV23 = provider.RSA_SSLV23_PADDING
    NO_PADDING = provider.RSA_NO_PADDING
    OAEP = provider.RSA_PKCS1_OAEP_PADDING


class PrivateEncryptPadding(IntEnum):
    """私钥加密/公钥解密可用的填充方式，取值与OpenSSL常量相同"""
    PKCS1 = provider.RSA_PKCS1_PADDING
    NO_PADDING = provider.RSA_NO_PADDING


class SignatureAlgorithm(Enum):
    """RSASSA-PKCS1-v1_5签名算法，值为(名称, 摘要算法, OpenSSL常量)"""
    MD5 = ('MD5withRSA', 'MD5', 2)
    SHA1 = ('SHA1withRSA', 'SHA1', 1)
    SHA224 = ('SHA224withRSA', 'SHA224', 6)
    SHA256 = ('SHA256withRSA', 'SHA256', 7)
    SHA384 = ('SHA384withRSA', 'SHA384', 8)
    SHA512 = ('SHA512withRSA', 'SHA512', 9)

    @property
    def digest(self) -> str:
        return self.value[1]


def _get_padding(padding_class, pad: int):
    if not isinstance(pad, int) or isinstance(pad, bool):
        raise UnsupportedPaddingException(f'填充方式必须为整数常量/Padding should be an integer constant, '
                                          f'not {type(pad).__name__}')
    try:
        return padding_class(pad)
    except ValueError:
        raise UnsupportedPaddingException(f'不支持的填充方式/Unsupported {pad} padding '
                                          f'for {padding_class.__name__}') from None


def get_signature_algorithm(algorithm: Union[SignatureAlgorithm, str, int]) -> SignatureAlgorithm:
    """按名称或OpenSSL常量获取签名算法，如SHA256withRSA、sha256、sha256WithRSAEncryption、7"""
    if isinstance(algorithm, SignatureAlgorithm):
        return algorithm
    if isinstance(algorithm, bool):
        raise UnsupportedAlgorithmException(f'未知的签名算法/Unknown signature algorithm: {algorithm}')
    for candidate in SignatureAlgorithm:
        name, digest, openssl_code = candidate.value
        if isinstance(algorithm, int):
            if algorithm == openssl_code:
                return candidate
        elif isinstance(algorithm, str):
            if algorithm.upper() in (name.upper(), digest, f'{digest}WITHRSAENCRYPTION'):
                return candidate
    raise UnsupportedAlgorithmException(f'未知的签名算法/Unknown signature algorithm: {algorithm}')


class RsaPublicKey:
    """RSA公钥，用于公钥加密、公钥解密和验证签名"""
    def __init__(self, key_material: KeyMaterial):
        self._key = resolve_public_key(key_material)

    @classmethod
    def from_key(cls, key) -> 'RsaPublicKey':
        """由已解析的cryptography公钥对象构造"""
        public_key = cls.__new__(cls)
        public_key._key = key
        return public_key

    @property
    def key_size(self) -> int:
        return self._key.key_size

    def encrypt(self, plaintext: Union[str, bytes, bytearray, memoryview],
                padding: Union[PublicEncryptPadding, int] = PublicEncryptPadding.PKCS1,
                encoding: Optional[Union[Encoding, str]] = 'base64') -> Union[str, bytes]:
        padding = _get_padding(PublicEncryptPadding, padding)
        encoding = get_encoding(encoding)
        return encoding.encode(provider.public_encrypt(self._key, to_octets(plaintext), padding))

    def decrypt(self, encrypted: Union[str, bytes, bytearray, memoryview],
                padding: Union[PrivateEncryptPadding, int] = PrivateEncryptPadding.PKCS1,
                encoding: Optional[Union[Encoding, str]] = 'base64') -> bytes:
        padding = _get_padding(PrivateEncryptPadding, padding)
        encoding = get_encoding(encoding)
        try:
            return provider.public_decrypt(self._key, encoding.decode(encrypted), padding)
        except OperationFailedException as e:
            logger.debug('public decryption failed: %s', type(e).__name__)
            raise DecryptionFailedException('解密失败/Decryption failed') from e

    def verify(self, message: Union[str, bytes, bytearray, memoryview],
               signature: Union[str, bytes, bytearray, memoryview],
               algorithm: Union[SignatureAlgorithm, str, int] = SignatureAlgorithm.SHA256,
               encoding: Optional[Union[Encoding, str]] = 'base64') -> bool:
        """验证签名，签名格式错误和签名不符均返回False"""
        algorithm = get_signature_algorithm(algorithm)
        encoding = get_encoding(encoding)
        try:
            return provider.verify(self._key, to_octets(message), encoding.decode(signature), algorithm.digest)
        except OperationFailedException as e:
            logger.debug('signature verification failed: %s', type(e).__name__)
            return False


class RsaPrivateKey:
    """RSA私钥，用于私钥解密、私钥加密和生成签名"""
    def __init__(self, key_material: KeyMaterial, password: Union[str, bytes, None] = None):
        self._key = resolve_private_key(key_material, password)

    @property
    def key_size(self) -> int:
        return self._key.key_size

    def get_public_key(self) -> RsaPublicKey:
        return RsaPublicKey.from_key(self._key.public_key())

    def decrypt(self, encrypted: Union[str, bytes, bytearray, memoryview],
                padding: Union[PublicEncryptPadding, int] = PublicEncryptPadding.PKCS1,
                encoding: Optional[Union[Encoding, str]] = 'base64') -> bytes:
        padding = _get_padding(PublicEncryptPadding, padding)
        encoding = get_encoding(encoding)
        try:
            return provider.private_decrypt(self._key, encoding.decode(encrypted), padding)
        except OperationFailedException as e:
            logger.debug('private decryption failed: %s', type(e).__name__)
            raise DecryptionFailedException('解密失败/Decryption failed') from e

    def encrypt(self, plaintext: Union[str, bytes, bytearray, memoryview],
                padding: Union[PrivateEncryptPadding, int] = PrivateEncryptPadding.PKCS1,
                encoding: Optional[Union[Encoding, str]] = 'base64') -> Union[str, bytes]:
        padding = _get_padding(PrivateEncryptPadding, padding)
        encoding = get_encoding(encoding)
        return encoding.encode(provider.private_encrypt(self._key, to_octets(plaintext), padding))

    def sign(self, message: Union[str, bytes, bytearray, memoryview],
             algorithm: Union[SignatureAlgorithm, str, int] = SignatureAlgorithm.SHA256,
             encoding: Optional[Union[Encoding, str]] = 'base64') -> Union[str, bytes]:
        algorithm = get_signature_algorithm(algorithm)
        encoding = get_encoding(encoding)
        return encoding.encode(provider.sign(self._key, to_octets(message), algorithm.digest))


# 以下函数在解析密钥之前先检查填充方式和编码方法，参数错误时不读取密钥文件

def rsa_public_encrypt(plaintext: Union[str, bytes, bytearray, memoryview], public_key: KeyMaterial,
                       padding: Union[PublicEncryptPadding, int] = PublicEncryptPadding.PKCS1,
                       encoding: Optional[Union[Encoding, str]] = 'base64') -> Union[str, bytes]:
    padding = _get_padding(PublicEncryptPadding, padding)
    encoding = get_encoding(encoding)
    return RsaPublicKey(public_key).encrypt(plaintext, padding, encoding)


def rsa_private_decrypt(encrypted: Union[str, bytes, bytearray, memoryview], private_key: KeyMaterial,
                        padding: Union[PublicEncryptPadding, int] = PublicEncryptPadding.PKCS1,
                        encoding: Optional[Union[Encoding, str]] = 'base64',
                        password: Union[str, bytes, None] = None) -> bytes:
    padding = _get_padding(PublicEncryptPadding, padding)
    encoding = get_encoding(encoding)
    return RsaPrivateKey(private_key, password).decrypt(encrypted, padding, encoding)


def rsa_private_encrypt(plaintext: Union[str, bytes, bytearray, memoryview], private_key: KeyMaterial,
                        padding: Union[PrivateEncryptPadding, int] = PrivateEncryptPadding.PKCS1,
                        encoding: Optional[Union[Encoding, str]] = 'base64',
                        password: Union[str, bytes, None] = None) -> Union[str, bytes]:
    padding = _get_padding(PrivateEncryptPadding, padding)
    encoding = get_encoding(encoding)
    return RsaPrivateKey(private_key, password).encrypt(plaintext, padding, encoding)


def rsa_public_decrypt(encrypted: Union[str, bytes, bytearray, memoryview], public_key: KeyMaterial,
                       padding: Union[PrivateEncryptPadding, int] = PrivateEncryptPadding.PKCS1,
                       encoding: Optional[Union[Encoding, str]] = 'base64') -> bytes:
    padding = _get_padding(PrivateEncryptPadding, padding)
    encoding = get_encoding(encoding)
    return RsaPublicKey(public_key).decrypt(encrypted, padding, encoding)


def rsa_sign(message: Union[str, bytes, bytearray, memoryview], private_key: KeyMaterial,
             algorithm: Union[SignatureAlgorithm, str, int] = SignatureAlgorithm.SHA256,
             encoding: Optional[Union[Encoding, str]] = 'base64',
             password: Union[str, bytes, None] = None) -> Union[str, bytes]:
    algorithm = get_signature_algorithm(algorithm)
    encoding = get_encoding(encoding)
    return RsaPrivateKey(private_key, password).sign(message, algorithm, encoding)


def rsa_verify(message: Union[str, bytes, bytearray, memoryview],
               signature: Union[str, bytes, bytearray, memoryview], public_key: KeyMaterial,
               algorithm: Union[SignatureAlgorithm, str, int] = SignatureAlgorithm.SHA256,
               encoding: Optional[Union[Encoding, str]] = 'base64') -> bool:
    algorithm = get_signature_algorithm(algorithm)
    encoding = get_encoding(encoding)
    try:
        verifier = RsaPublicKey(public_key)
    except ProviderFailureException as e:
        # 公钥无法解析时视为验证失败，密钥文件不存在仍直接抛出
        logger.debug('public key resolution failed: %s', e)
        return False
    return verifier.verify(message, signature, algorithm, encoding)
