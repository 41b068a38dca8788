import hmac
from enum import Enum
from typing import Union

from .commons import PaddingValidationException, UnsupportedPaddingException

BLOCK_SIZE = 128  # AES分组长度（比特）


def _block_byte_len(block_size: int) -> int:
    if not (0 < block_size < 2048):
        raise ValueError('分组大小必须大于0小于2048/Block size should be between 0 and 2048 exclusive')
    if block_size % 8 != 0:
        raise ValueError('分组大小必须为8的倍数/Block size should be a multiple of 8')
    return block_size // 8


def pkcs7_pad(data: Union[bytes, bytearray, memoryview], block_size: int = BLOCK_SIZE) -> bytes:
    """PKCS#7数据填充

    填充n个值为n的字节，n = 分组字节长度 - (数据长度 mod 分组字节长度)，
    数据长度恰好为分组长度整数倍时填充一个完整分组。
    :param data: 待填充数据
    :param block_size: 分组长度（比特）
    :return: 填充后的数据
    """
    block_byte_len = _block_byte_len(block_size)
    padding_byte_len = block_byte_len - len(data) % block_byte_len
    out_octets = bytearray(data)
    out_octets.extend([padding_byte_len] * padding_byte_len)
    return bytes(out_octets)


def pkcs7_unpad(data: Union[bytes, bytearray, memoryview]) -> bytes:
    """PKCS#7数据反填充

    最后一个字节值为n时，要求尾部n个字节均为n，否则抛出PaddingValidationException。
    """
    data = bytes(data)
    if len(data) == 0:
        raise PaddingValidationException('填充数据为空/Padded data is empty.')

    padding_byte_len = data[-1]
    if not (0 < padding_byte_len <= len(data)):
        raise PaddingValidationException('填充数据格式错误/Padded data is mal-formatted.')
    # 对尾部填充整体比较，不逐字节提前退出
    if not hmac.compare_digest(data[-padding_byte_len:], bytes([padding_byte_len]) * padding_byte_len):
        raise PaddingValidationException('填充数据格式错误/Padded data is mal-formatted.')
    return data[:-padding_byte_len]


class Padding(Enum):
    """分组密码的数据填充方法，目前仅支持PKCS#7"""
    PKCS7 = 'PKCS7'

    def pad(self, data: Union[bytes, bytearray, memoryview], block_size: int = BLOCK_SIZE) -> bytes:
        if self is Padding.PKCS7:
            return pkcs7_pad(data, block_size)
        raise UnsupportedPaddingException(f'未知的填充方法/Unknown padding: {self.value}')

    def unpad(self, data: Union[bytes, bytearray, memoryview]) -> bytes:
        if self is Padding.PKCS7:
            return pkcs7_unpad(data)
        raise UnsupportedPaddingException(f'未知的填充方法/Unknown padding: {self.value}')


def get_padding(padding_name: Union[Padding, str, None]) -> Padding:
    if isinstance(padding_name, Padding):
        return padding_name
    if isinstance(padding_name, str) and padding_name.upper() == 'PKCS7':
        return Padding.PKCS7
    raise UnsupportedPaddingException(f'未知的填充方法/Unknown padding: {padding_name}')
