from typing import BinaryIO, Iterator, Optional

from .config import READ_CHUNK_SIZE
from .errors import EndOfStream


def _file_chunks(fp: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    while True:
        chunk = fp.read(chunk_size)
        if not chunk:
            return
        yield chunk


class Parser:
    """
    position-aware cursor over an ordered byte source

    knows nothing about bencode: it only hands out bytes one at a time or
    in fixed-length runs, and lets the caller look at the next byte first.
    the source is pulled lazily, so at most one chunk is buffered beyond
    what has been consumed. not safe to share between threads.

    Attributes:
        position: number of bytes consumed so far, for diagnostics
        _chunks: iterator over the not yet pulled part of the source
        _buffer: most recently pulled chunk
        _offset: index of the next unread byte in _buffer
    """

    def __init__(self, source, chunk_size: int = READ_CHUNK_SIZE):
        """
        initializes a Parser

        Args:
            source: bytes-like object, binary file-like object with read(n),
                or an iterable of bytes-like chunks (ints count as one byte)
            chunk_size: how many bytes to request per read() on file sources

        Raises:
            TypeError: if source is a str or not a byte source at all
            ValueError: if chunk_size is not positive
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if isinstance(source, str):
            raise TypeError("Parser needs bytes, not str")

        if isinstance(source, (bytes, bytearray, memoryview)):
            self._chunks: Iterator = iter((bytes(source),))
        elif hasattr(source, "read"):
            self._chunks = _file_chunks(source, chunk_size)
        else:
            try:
                self._chunks = iter(source)
            except TypeError:
                raise TypeError(f"unsupported byte source: {type(source).__name__}") from None

        self._buffer = b""
        self._offset = 0
        self.position = 0

    def _fill(self) -> bool:
        """
        pulls chunks until there is an unread byte

        Returns:
            False if the source is exhausted, True otherwise
        """
        while self._offset >= len(self._buffer):
            try:
                chunk = next(self._chunks)
            except StopIteration:
                return False
            self._buffer = bytes((chunk,)) if isinstance(chunk, int) else bytes(chunk)
            self._offset = 0
        return True

    def peek(self) -> Optional[int]:
        """returns the next unread byte without consuming it, None at end of stream"""
        if not self._fill():
            return None
        return self._buffer[self._offset]

    def next_byte(self) -> int:
        """
        consumes and returns the next byte

        Raises:
            EndOfStream: if the source is exhausted
        """
        if not self._fill():
            raise EndOfStream("unexpected end of input", self.position)
        byte = self._buffer[self._offset]
        self._offset += 1
        self.position += 1
        return byte

    def read_exact(self, n: int) -> bytes:
        """
        consumes and returns exactly n bytes

        the parser must not be used again after this fails

        Args:
            n: number of bytes to read

        Returns:
            the requested bytes

        Raises:
            EndOfStream: if fewer than n bytes remain
            ValueError: if n is negative
        """
        if n < 0:
            raise ValueError(f"cannot read a negative number of bytes: {n}")

        parts = []
        remaining = n
        while remaining:
            if not self._fill():
                raise EndOfStream(f"expected {n} bytes, only {n - remaining} available", self.position)
            part = self._buffer[self._offset:self._offset + remaining]
            self._offset += len(part)
            self.position += len(part)
            remaining -= len(part)
            parts.append(part)
        return b"".join(parts)

    @property
    def buffered(self) -> int:
        """number of bytes pulled from the source but not yet consumed"""
        return len(self._buffer) - self._offset

    def at_end(self) -> bool:
        """True when no unread byte remains"""
        return not self._fill()
