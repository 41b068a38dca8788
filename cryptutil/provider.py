"""底层密码算法提供者

对cryptography库的薄封装，所有cryptography抛出的异常在此转换为ProviderFailureException。
cryptography未提供的RSA原始运算（无填充、私钥PKCS#1类型1加密）使用密钥参数直接计算，私钥运算加盲化。
"""
import math
import secrets
import logging
from typing import Optional

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .commons import ProviderFailureException

logger = logging.getLogger(__name__)

# OpenSSL中RSA填充方式常量
RSA_PKCS1_PADDING = 1
RSA_SSLV23_PADDING = 2
RSA_NO_PADDING = 3
RSA_PKCS1_OAEP_PADDING = 4

_SYMMETRIC_METHODS = {
    'aes-128-cbc': (16, algorithms.AES, modes.CBC),
    'aes-192-cbc': (24, algorithms.AES, modes.CBC),
    'aes-256-cbc': (32, algorithms.AES, modes.CBC),
}


def _symmetric_cipher(method: str, key: bytes, iv: bytes) -> Cipher:
    try:
        key_byte_len, algorithm, mode = _SYMMETRIC_METHODS[method]
    except KeyError:
        raise ProviderFailureException(f'不支持的算法/Unsupported method: {method}') from None
    if len(key) != key_byte_len:
        raise ProviderFailureException(f'密钥长度与算法{method}不符/Key length does not match {method}')
    try:
        return Cipher(algorithm(key), mode(iv))
    except (ValueError, UnsupportedAlgorithm) as e:
        raise ProviderFailureException(str(e)) from e


def symmetric_encrypt(method: str, key: bytes, iv: bytes, data: bytes) -> bytes:
    """分组密码加密，数据应已填充，本函数不再填充"""
    logger.debug('symmetric encrypt %s, %d bytes', method, len(data))
    encryptor = _symmetric_cipher(method, key, iv).encryptor()
    try:
        return encryptor.update(data) + encryptor.finalize()
    except ValueError as e:
        raise ProviderFailureException(str(e)) from e


def symmetric_decrypt(method: str, key: bytes, iv: bytes, data: bytes) -> bytes:
    """分组密码解密，不去除填充"""
    logger.debug('symmetric decrypt %s, %d bytes', method, len(data))
    decryptor = _symmetric_cipher(method, key, iv).decryptor()
    try:
        return decryptor.update(data) + decryptor.finalize()
    except ValueError as e:
        raise ProviderFailureException(str(e)) from e


def load_public_key(pem: bytes) -> rsa.RSAPublicKey:
    try:
        key = serialization.load_pem_public_key(pem)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ProviderFailureException('公钥格式错误/Malformed public key') from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise ProviderFailureException('公钥不是RSA公钥/Public key is not an RSA key')
    return key


def load_private_key(pem: bytes, password: Optional[bytes] = None) -> rsa.RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(pem, password=password)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ProviderFailureException('私钥格式错误/Malformed private key') from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise ProviderFailureException('私钥不是RSA私钥/Private key is not an RSA key')
    return key


def _modulus_byte_len(n: int) -> int:
    return (n.bit_length() + 7) // 8


def _raw_input(octets: bytes, n: int) -> int:
    if len(octets) != _modulus_byte_len(n):
        raise ProviderFailureException('数据长度必须等于模长/Data length should equal the modulus length')
    m = int.from_bytes(octets, byteorder='big', signed=False)
    if m >= n:
        raise ProviderFailureException('数据值超过模数/Data value is out of the modulus range')
    return m


def _raw_public(key: rsa.RSAPublicKey, octets: bytes) -> bytes:
    numbers = key.public_numbers()
    m = _raw_input(octets, numbers.n)
    return pow(m, numbers.e, numbers.n).to_bytes(_modulus_byte_len(numbers.n), byteorder='big', signed=False)


def _raw_private(key: rsa.RSAPrivateKey, octets: bytes) -> bytes:
    numbers = key.private_numbers()
    n, e = numbers.public_numbers.n, numbers.public_numbers.e
    c = _raw_input(octets, n)

    # 盲化：c' = c * r^e，m = (c')^d * r^-1
    while True:
        r = secrets.randbelow(n - 2) + 2
        if math.gcd(r, n) == 1:
            break
    blinded = c * pow(r, e, n) % n
    m = pow(blinded, numbers.d, n) * pow(r, -1, n) % n
    return m.to_bytes(_modulus_byte_len(n), byteorder='big', signed=False)


def _oaep() -> padding.OAEP:
    return padding.OAEP(mgf=padding.MGF1(algorithm=hashes.SHA1()), algorithm=hashes.SHA1(), label=None)


def _sslv23_unavailable():
    raise ProviderFailureException('cryptography不提供SSLv23填充/SSLv23 padding is not available from the provider')


def public_encrypt(key: rsa.RSAPublicKey, data: bytes, pad: int) -> bytes:
    logger.debug('rsa public encrypt, padding %d, %d bytes', pad, len(data))
    if pad == RSA_NO_PADDING:
        return _raw_public(key, data)
    if pad == RSA_SSLV23_PADDING:
        _sslv23_unavailable()
    try:
        return key.encrypt(data, _oaep() if pad == RSA_PKCS1_OAEP_PADDING else padding.PKCS1v15())
    except ValueError as e:
        raise ProviderFailureException(str(e)) from e


def private_decrypt(key: rsa.RSAPrivateKey, data: bytes, pad: int) -> bytes:
    logger.debug('rsa private decrypt, padding %d, %d bytes', pad, len(data))
    if pad == RSA_NO_PADDING:
        return _raw_private(key, data)
    if pad == RSA_SSLV23_PADDING:
        _sslv23_unavailable()
    try:
        return key.decrypt(data, _oaep() if pad == RSA_PKCS1_OAEP_PADDING else padding.PKCS1v15())
    except ValueError as e:
        raise ProviderFailureException(str(e)) from e


def private_encrypt(key: rsa.RSAPrivateKey, data: bytes, pad: int) -> bytes:
    logger.debug('rsa private encrypt, padding %d, %d bytes', pad, len(data))
    if pad == RSA_NO_PADDING:
        return _raw_private(key, data)

    # PKCS#1 v1.5 类型1填充：00 01 FF..FF 00 || data，FF至少8个
    k = (key.key_size + 7) // 8
    if len(data) > k - 11:
        raise ProviderFailureException('数据长度超过模长减11/Data is too long for the key size')
    encoded = bytearray(b'\x00\x01')
    encoded.extend(b'\xff' * (k - 3 - len(data)))
    encoded.append(0)
    encoded.extend(data)
    return _raw_private(key, bytes(encoded))


def public_decrypt(key: rsa.RSAPublicKey, data: bytes, pad: int) -> bytes:
    logger.debug('rsa public decrypt, padding %d, %d bytes', pad, len(data))
    if pad == RSA_NO_PADDING:
        return _raw_public(key, data)
    try:
        return key.recover_data_from_signature(data, padding.PKCS1v15(), None)
    except (InvalidSignature, ValueError) as e:
        raise ProviderFailureException('公钥解密失败/Public decryption failed') from e


def _hash_algorithm(digest_name: str) -> hashes.HashAlgorithm:
    try:
        return getattr(hashes, digest_name)()
    except AttributeError:
        raise ProviderFailureException(f'不支持的摘要算法/Unsupported digest: {digest_name}') from None


def sign(key: rsa.RSAPrivateKey, data: bytes, digest_name: str) -> bytes:
    logger.debug('rsa sign with %s, %d bytes', digest_name, len(data))
    try:
        return key.sign(data, padding.PKCS1v15(), _hash_algorithm(digest_name))
    except (ValueError, UnsupportedAlgorithm) as e:
        raise ProviderFailureException(str(e)) from e


def verify(key: rsa.RSAPublicKey, data: bytes, signature: bytes, digest_name: str) -> bool:
    logger.debug('rsa verify with %s, %d bytes', digest_name, len(data))
    try:
        key.verify(signature, data, padding.PKCS1v15(), _hash_algorithm(digest_name))
    except InvalidSignature:
        return False
    except (ValueError, UnsupportedAlgorithm) as e:
        raise ProviderFailureException(str(e)) from e
    return True
