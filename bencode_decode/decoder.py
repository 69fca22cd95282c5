import io
import logging
import sys
from typing import BinaryIO, Dict, Iterator, List, Optional, Type, Union

from .config import DEFAULT_MAX_DEPTH
from .errors import (
    DecodeError,
    DepthExceeded,
    EndOfStream,
    InvalidNumber,
    InvalidStringLength,
    MalformedSyntax,
    TrailingData,
    UnorderedOrDuplicateKey,
)
from .parser import Parser

logger = logging.getLogger(__name__)

Value = Union[int, bytes, List["Value"], Dict[bytes, "Value"]]

INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1
MAX_STRING_LENGTH = 2 ** 63 - 1

# longest digit runs that can still be in range
MAX_INT_DIGITS = len(str(INT_MAX))
MAX_LENGTH_DIGITS = len(str(MAX_STRING_LENGTH))

_INT = ord("i")
_LIST = ord("l")
_DICT = ord("d")
_END = ord("e")
_COLON = ord(":")
_MINUS = ord("-")
_ZERO = ord("0")
_NINE = ord("9")


def _is_digit(byte: int) -> bool:
    return _ZERO <= byte <= _NINE


def _show(byte: int) -> str:
    return repr(bytes((byte,)))


def _read_digits(parser: Parser, terminator: int, limit: int, error: Type[DecodeError]) -> bytes:
    """
    consumes an ASCII digit run and the terminator after it

    Args:
        parser: parser positioned at the first digit
        terminator: byte that ends the run, consumed but not returned
        limit: maximum number of digits accepted
        error: exception raised when the run is longer than limit

    Returns:
        the digits, possibly empty
    """
    run = bytearray()
    while True:
        byte = parser.next_byte()
        if byte == terminator:
            return bytes(run)
        if not _is_digit(byte):
            raise MalformedSyntax(
                f"unexpected byte {_show(byte)}, expected digit or {_show(terminator)}",
                parser.position - 1)
        if len(run) == limit:
            raise error(f"more than {limit} digits", parser.position - 1)
        run.append(byte)


def _decode_int(parser: Parser) -> int:
    start = parser.position
    parser.next_byte()

    negative = parser.peek() == _MINUS
    if negative:
        parser.next_byte()

    digits = _read_digits(parser, _END, MAX_INT_DIGITS, InvalidNumber)
    if not digits:
        raise MalformedSyntax("integer has no digits", start)
    if digits[0] == _ZERO and len(digits) > 1:
        raise InvalidNumber(f"leading zero in integer {digits.decode()}", start)
    if digits[0] == _ZERO and negative:
        raise InvalidNumber("negative zero", start)

    value = -int(digits) if negative else int(digits)
    if not INT_MIN <= value <= INT_MAX:
        raise InvalidNumber(f"integer {value} outside the 64-bit range", start)
    return value


def _decode_string(parser: Parser) -> bytes:
    start = parser.position
    digits = _read_digits(parser, _COLON, MAX_LENGTH_DIGITS, InvalidStringLength)
    if not digits:
        raise MalformedSyntax("byte string has no length", start)
    if digits[0] == _ZERO and len(digits) > 1:
        raise InvalidStringLength(f"leading zero in length {digits.decode()}", start)

    length = int(digits)
    if length > MAX_STRING_LENGTH:
        raise InvalidStringLength(f"length {length} too large", start)
    return parser.read_exact(length)


def _decode_list(parser: Parser, depth: int, max_depth: int) -> List[Value]:
    parser.next_byte()
    items = []
    while True:
        byte = parser.peek()
        if byte is None:
            raise EndOfStream("unterminated list", parser.position)
        if byte == _END:
            parser.next_byte()
            return items
        items.append(_decode_value(parser, depth, max_depth))


def _decode_dict(parser: Parser, depth: int, max_depth: int) -> Dict[bytes, Value]:
    parser.next_byte()
    # insertion order is ascending key order, so re-encoding reproduces the input
    result: Dict[bytes, Value] = {}
    previous: Optional[bytes] = None
    while True:
        byte = parser.peek()
        if byte is None:
            raise EndOfStream("unterminated dictionary", parser.position)
        if byte == _END:
            parser.next_byte()
            return result
        if not _is_digit(byte):
            raise MalformedSyntax(f"dictionary key must be a byte string, got {_show(byte)}", parser.position)

        key_position = parser.position
        key = _decode_string(parser)
        if previous is not None and key <= previous:
            raise UnorderedOrDuplicateKey(key, previous, key_position)

        result[key] = _decode_value(parser, depth, max_depth)
        previous = key


def _decode_value(parser: Parser, depth: int, max_depth: int) -> Value:
    """
    dispatches on the next byte; depth is the number of open lists/dictionaries
    """
    byte = parser.peek()
    if byte is None:
        raise EndOfStream("expected a value", parser.position)
    if byte == _INT:
        return _decode_int(parser)
    if _is_digit(byte):
        return _decode_string(parser)
    if byte == _LIST or byte == _DICT:
        if depth >= max_depth:
            raise DepthExceeded(max_depth, parser.position)
        if byte == _LIST:
            return _decode_list(parser, depth + 1, max_depth)
        return _decode_dict(parser, depth + 1, max_depth)
    raise MalformedSyntax(f"unexpected byte {_show(byte)}", parser.position)


def decode(parser: Parser, max_depth: Optional[int] = None) -> Value:
    """
    decodes exactly one bencoded value from parser

    bytes after the value are left unread; a second call continues from there.
    the parser must not be reused after a failure.

    Args:
        parser: parser positioned at the start of a value
        max_depth: how many lists/dictionaries may be nested, DEFAULT_MAX_DEPTH if None

    Returns:
        int, bytes, list or dict (keys are bytes, in ascending order)

    Raises:
        DecodeError: one of its subclasses, if the input is not valid bencode
        ValueError: if max_depth is negative
    """
    if max_depth is None:
        max_depth = DEFAULT_MAX_DEPTH
    elif max_depth < 0:
        raise ValueError(f"max_depth must not be negative, got {max_depth}")

    try:
        return _decode_value(parser, 0, max_depth)
    except RecursionError:
        limit = sys.getrecursionlimit()
        logger.debug("interpreter recursion limit %d hit at byte %d", limit, parser.position)
        raise DepthExceeded(
            max_depth, parser.position,
            f"nesting too deep for the interpreter recursion limit ({limit}), below max_depth={max_depth}",
        ) from None
    except DecodeError as e:
        logger.debug("decode failed with %s: %s", type(e).__name__, e)
        raise


def expect_end(parser: Parser) -> None:
    """
    Raises:
        TrailingData: if any byte remains unread in parser
    """
    if not parser.at_end():
        raise TrailingData("extra data after decoding", parser.position)


def loads(data: Union[bytes, bytearray, memoryview], max_depth: Optional[int] = None,
          strict: bool = True) -> Value:
    """
    decodes a complete bencoded buffer

    Args:
        data: the encoded bytes
        max_depth: see decode()
        strict: if True, anything after the first value is an error

    Raises:
        TrailingData: if strict and bytes remain after the value
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"expected bytes-like data, got {type(data).__name__}")

    parser = Parser(data)
    value = decode(parser, max_depth)
    if strict:
        expect_end(parser)
    return value


def load(fp: BinaryIO, max_depth: Optional[int] = None) -> Value:
    """
    decodes one value from a binary file object, reading it lazily

    the parser reads ahead in chunks; when fp is seekable it is moved back
    so it sits right after the value. otherwise fp may be left past it
    """
    parser = Parser(fp)
    value = decode(parser, max_depth)
    unread = parser.buffered
    if unread and hasattr(fp, "seekable") and fp.seekable():
        fp.seek(-unread, io.SEEK_CUR)
    return value


def iter_decode(parser: Parser, max_depth: Optional[int] = None) -> Iterator[Value]:
    """
    yields consecutive top level values until the parser is exhausted

    Yields:
        each complete decoded value, in stream order
    """
    while not parser.at_end():
        yield decode(parser, max_depth)
