from typing import Optional


class DecodeError(ValueError):
    """
    base class for every bencode decoding failure

    Attributes:
        message: what went wrong
        position: byte offset of the cursor when the failure was detected
    """

    def __init__(self, message: str, position: Optional[int] = None):
        self.message = message
        self.position = position
        if position is None:
            super().__init__(message)
        else:
            super().__init__(f"{message} (at byte {position})")


class EndOfStream(DecodeError):
    """input ended before the current value was complete"""


class MalformedSyntax(DecodeError):
    """a byte matched no bencode production"""


class InvalidNumber(DecodeError):
    """leading zeros, negative zero, or an integer outside the 64-bit range"""


class InvalidStringLength(InvalidNumber):
    """malformed or oversized byte string length prefix"""


class UnorderedOrDuplicateKey(DecodeError):
    """
    dictionary key not strictly greater than the key before it

    Attributes:
        key: the offending key
        previous_key: the key decoded just before it
    """

    def __init__(self, key: bytes, previous_key: bytes, position: Optional[int] = None):
        self.key = key
        self.previous_key = previous_key
        if key == previous_key:
            message = f"duplicate dictionary key {key!r}"
        else:
            message = f"dictionary key {key!r} sorts before previous key {previous_key!r}"
        super().__init__(message, position)


class DepthExceeded(DecodeError):
    """nesting of lists/dictionaries went past max_depth, or past what the interpreter can recurse"""

    def __init__(self, max_depth: int, position: Optional[int] = None, message: Optional[str] = None):
        self.max_depth = max_depth
        super().__init__(message or f"nesting deeper than max_depth={max_depth}", position)


class TrailingData(DecodeError):
    """bytes left over after a complete top level value"""
