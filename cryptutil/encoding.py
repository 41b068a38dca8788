import re
import base64
import binascii
from enum import Enum
from typing import Union, Optional

from .commons import MalformedEncodedInputException, UnsupportedEncodingException, to_octets

_HEX_PATTERN = re.compile(rb'[0-9a-fA-F]*')
_WHITESPACE_PATTERN = re.compile(rb'[\t\n\v\f\r ]+')


class Encoding(Enum):
    """密文、签名等字节串在接口处的文本表示方法"""
    NONE = 'none'
    HEX = 'hex'
    BASE64 = 'base64'

    def encode(self, octets: Union[bytes, bytearray, memoryview]) -> Union[str, bytes]:
        """将字节串编码为文本，NONE时原样返回字节串"""
        if self is Encoding.NONE:
            return to_octets(octets)
        elif self is Encoding.HEX:
            return to_octets(octets).hex()
        else:
            return base64.standard_b64encode(octets).decode('ascii')

    def decode(self, text: Union[str, bytes, bytearray, memoryview]) -> bytes:
        """将文本解码为字节串

        :param text: 编码后的文本，NONE时字符串按ISO-8859-1逐字节转换
        :return: 解码后的字节串
        """
        if self is Encoding.NONE:
            if isinstance(text, str):
                try:
                    return text.encode('iso-8859-1')
                except UnicodeEncodeError as e:
                    raise MalformedEncodedInputException('文本含有超出单字节范围的字符/'
                                                         'Text contains characters beyond U+00FF') from e
            return to_octets(text)

        if isinstance(text, str):
            try:
                octets = text.encode('ascii')
            except UnicodeEncodeError as e:
                raise MalformedEncodedInputException('编码文本含有非ASCII字符/'
                                                     'Encoded text contains non-ASCII characters') from e
        else:
            octets = to_octets(text)

        if self is Encoding.HEX:
            if len(octets) % 2 != 0 or not _HEX_PATTERN.fullmatch(octets):
                raise MalformedEncodedInputException('十六进制文本格式错误/Malformed hex text')
            return bytes.fromhex(octets.decode('ascii'))
        else:
            try:
                return base64.b64decode(_WHITESPACE_PATTERN.sub(b'', octets), validate=True)
            except binascii.Error as e:
                raise MalformedEncodedInputException('Base64文本格式错误/Malformed base64 text') from e


def get_encoding(encoding: Union[Encoding, str, None]) -> Encoding:
    """按名称获取编码方法，None表示不编码"""
    if encoding is None:
        return Encoding.NONE
    if isinstance(encoding, Encoding):
        return encoding
    if isinstance(encoding, str):
        try:
            return Encoding(encoding.lower())
        except ValueError:
            pass
    raise UnsupportedEncodingException(f'未知的编码方法/Unknown encoding: {encoding}')


def encode(octets: Union[bytes, bytearray, memoryview],
           encoding: Union[Encoding, str, None] = 'base64') -> Union[str, bytes]:
    return get_encoding(encoding).encode(octets)


def decode(text: Union[str, bytes, bytearray, memoryview],
           encoding: Optional[Union[Encoding, str]] = 'base64') -> bytes:
    return get_encoding(encoding).decode(text)
