"""Low-level encoders and decoders for the primitive building blocks of the
OSC wire format: 32-bit aligned strings and blobs.

Every encoded item in an OSC packet occupies a multiple of four bytes. The
functions in this module implement the padding rule and the reading side of
the format via the `Reader` class that tracks the position in a byte buffer.
"""

from struct import Struct
from typing import Union

from .errors import MalformedDataError

__all__ = (
    "Reader",
    "decode_blob",
    "decode_string",
    "encode_blob",
    "encode_string",
    "pad_to_32_bits",
)

_int32 = Struct(">i")

BytesLike = Union[bytes, bytearray, memoryview]


def _padded_length(length: int) -> int:
    """Returns the smallest multiple of four that is not smaller than the
    given length.
    """
    return (length + 3) & ~0x03


class Reader:
    """Cursor over a byte buffer that is used by the decoders to consume the
    encoded items one by one.

    Reads that would run past the end of the buffer raise a
    MalformedDataError_ and leave the cursor where it was.
    """

    def __init__(self, data: BytesLike):
        self._data = bytes(data)
        self._position = 0

    @property
    def at_end(self) -> bool:
        """Returns whether all the bytes in the buffer have been consumed."""
        return self._position >= len(self._data)

    @property
    def position(self) -> int:
        """Returns the number of bytes consumed so far."""
        return self._position

    @property
    def remaining(self) -> int:
        """Returns the number of bytes that have not been consumed yet."""
        return len(self._data) - self._position

    def read(self, size: int) -> bytes:
        """Reads exactly the given number of bytes from the buffer.

        Raises:
            MalformedDataError: if there are fewer bytes left in the buffer
        """
        if size < 0 or size > self.remaining:
            raise MalformedDataError(
                f"expected {size} bytes at offset {self._position}, "
                f"only {self.remaining} left"
            )
        start = self._position
        self._position += size
        return self._data[start : self._position]

    def read_struct(self, struct: Struct) -> tuple:
        """Reads and unpacks a fixed-size structure from the buffer."""
        return struct.unpack(self.read(struct.size))

    def read_until_nul(self) -> bytes:
        """Reads bytes up to and including the next NUL byte.

        Raises:
            MalformedDataError: if there is no NUL byte in the rest of the
                buffer
        """
        index = self._data.find(b"\x00", self._position)
        if index < 0:
            raise MalformedDataError("OSC string is not NUL-terminated")
        return self.read(index - self._position + 1)


def pad_to_32_bits(data: BytesLike) -> bytes:
    """Appends NUL bytes to the given data until its length becomes a multiple
    of four. Empty input stays empty.
    """
    data = bytes(data)
    return data + b"\x00" * (_padded_length(len(data)) - len(data))


def encode_string(value: str) -> bytes:
    """Encodes a string as a NUL-terminated, 32-bit aligned OSC string."""
    return pad_to_32_bits(value.encode("utf-8") + b"\x00")


def decode_string(reader: Reader) -> str:
    """Decodes an OSC string from the current position of the reader.

    Raises:
        MalformedDataError: if the string is not terminated, if its padding
            contains non-NUL bytes or if it is not valid UTF-8
    """
    raw = reader.read_until_nul()
    padding = reader.read(_padded_length(len(raw)) - len(raw))
    if padding.strip(b"\x00"):
        raise MalformedDataError("OSC string padding contains non-NUL bytes")

    try:
        return raw.decode("utf-8").strip("\x00")
    except UnicodeDecodeError as ex:
        raise MalformedDataError("OSC string is not valid UTF-8") from ex


def encode_blob(data: BytesLike) -> bytes:
    """Encodes a byte sequence as an OSC blob: a big-endian 32-bit length,
    the bytes themselves and the padding.
    """
    data = bytes(data)
    return pad_to_32_bits(_int32.pack(len(data)) + data)


def decode_blob(reader: Reader) -> bytes:
    """Decodes an OSC blob from the current position of the reader.

    Raises:
        MalformedDataError: if the declared length of the blob is negative or
            exceeds the number of remaining bytes
    """
    (length,) = reader.read_struct(_int32)
    if length < 0:
        raise MalformedDataError(f"negative OSC blob length: {length}")
    elif length == 0:
        return b""

    return reader.read(_padded_length(length))[:length]
