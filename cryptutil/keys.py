import os
import re
import logging
from typing import Optional, Union

from cryptography.hazmat.primitives.hashes import Hash, MD5

from . import provider
from .commons import InvalidKeyLengthException, InvalidIvLengthException, KeyFileNotFoundException, to_octets

logger = logging.getLogger(__name__)

AES_KEY_BYTE_LENGTHS = (16, 24, 32)
IV_BYTE_LEN = 16

PEM_SUFFIX = '.pem'
PEM_LINE_WIDTH = 64
PUBLIC_KEY_LABEL = 'PUBLIC KEY'
RSA_PRIVATE_KEY_LABEL = 'RSA PRIVATE KEY'

_WHITESPACE_PATTERN = re.compile(r'\s+')

KeyMaterial = Union[str, bytes, os.PathLike]


def validate_symmetric_key(secret_key: Union[str, bytes, bytearray]) -> bytes:
    """检查对称密钥长度，必须为16、24或32字节"""
    secret_key = to_octets(secret_key)
    if len(secret_key) not in AES_KEY_BYTE_LENGTHS:
        raise InvalidKeyLengthException(f'密钥长度必须为16、24或32字节/'
                                        f'Key length must be 16, 24, or 32 bytes; got {len(secret_key)}')
    return secret_key


def validate_iv(iv: Union[str, bytes, bytearray, None]) -> Optional[bytes]:
    """检查初始向量IV长度，空值表示未提供"""
    if not iv:
        return None
    iv = to_octets(iv)
    if len(iv) != IV_BYTE_LEN:
        raise InvalidIvLengthException(f'初始向量IV必须为16字节/IV length must be 16 bytes; got {len(iv)}')
    return iv


def derive_iv(secret_key: bytes) -> bytes:
    """由密钥推导初始向量IV

    取密钥MD5摘要的小写十六进制表示的前16个字符。结果可重复，不具有随机性，
    仅用于兼容未提供IV的调用方式，不适用于要求IV不可预测的场合。
    """
    digest = Hash(MD5())
    digest.update(secret_key)
    return digest.finalize().hex()[:IV_BYTE_LEN].encode('ascii')


def resolve_iv(secret_key: bytes, iv: Union[str, bytes, bytearray, None]) -> bytes:
    iv = validate_iv(iv)
    if iv is None:
        logger.debug('no IV supplied, deriving from key')
        return derive_iv(secret_key)
    return iv


def algorithm_for(secret_key: bytes) -> str:
    """由密钥长度确定算法名称，如aes-256-cbc"""
    return f'aes-{8 * len(validate_symmetric_key(secret_key))}-cbc'


def is_key_file(key_material: KeyMaterial) -> bool:
    """以.pem结尾的视为密钥文件路径，否则视为密钥文本"""
    if isinstance(key_material, os.PathLike):
        key_material = os.fspath(key_material)
    if isinstance(key_material, bytes):
        return key_material.endswith(PEM_SUFFIX.encode('ascii'))
    return key_material.endswith(PEM_SUFFIX)


def read_key_file(path: Union[str, bytes, os.PathLike]) -> bytes:
    if not os.path.isfile(path):
        raise KeyFileNotFoundException(f'密钥文件不存在/Key file does not exist: {os.fsdecode(path)}')
    with open(path, 'rb') as key_file:
        return key_file.read()


def pem_wrap(body: Union[str, bytes], label: str) -> str:
    """为密钥文本加上PEM头尾，正文按64字符换行"""
    if isinstance(body, bytes):
        body = body.decode('iso-8859-1')
    body = _WHITESPACE_PATTERN.sub('', body)
    lines = [f'-----BEGIN {label}-----']
    lines.extend(body[i:i + PEM_LINE_WIDTH] for i in range(0, len(body), PEM_LINE_WIDTH))
    lines.append(f'-----END {label}-----')
    return '\n'.join(lines)


def _load_pem(key_material: KeyMaterial, label: str) -> bytes:
    if isinstance(key_material, os.PathLike):
        key_material = os.fspath(key_material)
    if is_key_file(key_material):
        return read_key_file(key_material)
    return pem_wrap(key_material, label).encode('utf-8')


def resolve_public_key(key_material: KeyMaterial):
    """获取RSA公钥

    :param key_material: 不含头尾的公钥文本，或以.pem结尾的公钥文件路径
    :return: cryptography的RSAPublicKey对象
    """
    return provider.load_public_key(_load_pem(key_material, PUBLIC_KEY_LABEL))


def resolve_private_key(key_material: KeyMaterial, password: Union[str, bytes, None] = None):
    """获取RSA私钥

    :param key_material: 不含头尾的PKCS#1私钥文本，或以.pem结尾的私钥文件路径
    :param password: 加密私钥文件的口令
    :return: cryptography的RSAPrivateKey对象
    """
    if password is not None:
        password = to_octets(password)
    return provider.load_private_key(_load_pem(key_material, RSA_PRIVATE_KEY_LABEL), password)
