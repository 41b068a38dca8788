from typing import Union


class CryptoException(Exception):
    """本项目所有异常的基类"""

    def __init__(self, *args):
        super().__init__(*args)


class InvalidKeyLengthException(CryptoException, ValueError):
    pass


class InvalidIvLengthException(CryptoException, ValueError):
    pass


class UnsupportedPaddingException(CryptoException, ValueError):
    pass


class UnsupportedEncodingException(CryptoException, ValueError):
    pass


class UnsupportedAlgorithmException(CryptoException, ValueError):
    pass


class KeyFileNotFoundException(CryptoException, FileNotFoundError):
    pass


class OperationFailedException(CryptoException):
    """密码运算过程中的失败（解码、底层算法、填充校验），与输入参数的格式错误相区别"""
    pass


class MalformedEncodedInputException(OperationFailedException):
    pass


class ProviderFailureException(OperationFailedException):
    pass


class PaddingValidationException(OperationFailedException):
    pass


class DecryptionFailedException(OperationFailedException):
    """解密失败

    解码失败、底层算法失败、填充校验失败对调用方不作区分，具体原因保存在__cause__中。
    """
    pass


def to_octets(data: Union[str, bytes, bytearray, memoryview], encoding: str = 'utf-8') -> bytes:
    """将字符串或类字节串统一转换为bytes，字符串按encoding编码"""
    if isinstance(data, str):
        return data.encode(encoding)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f'数据类型必须为字符串或字节串/Data should be str or bytes-like, not {type(data).__name__}')
