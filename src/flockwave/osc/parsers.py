"""Parser for stream-oriented transports where each OSC packet is preceded by
its length as a big-endian 32-bit integer.
"""

from struct import Struct
from typing import List, Optional

from .config import MAX_STREAM_PACKET_SIZE
from .errors import InvalidFramingError

__all__ = ("LengthPrefixedParser",)


class LengthPrefixedParser:
    """Parser that reassembles length-prefixed OSC packets from a byte stream
    that may arrive in arbitrary chunks.

    A length prefix that is not a multiple of four or that exceeds the
    maximum packet length means that the stream is out of sync; the parser
    discards its buffer and raises InvalidFramingError_ in this case.
    """

    _length_struct = Struct(">I")

    def __init__(self, max_length: int = MAX_STREAM_PACKET_SIZE):
        """Constructor.

        Parameters:
            max_length: the largest packet length that the parser accepts in
                a length prefix
        """
        self.max_length = max_length

        self._buffer = bytearray()
        self._expected: Optional[int] = None

    def feed(self, data: bytes) -> List[bytes]:
        """Feeds the parser with the given chunk of the stream.

        Returns:
            the raw bodies of the packets that were completed by the chunk

        Raises:
            InvalidFramingError: if a length prefix in the stream is invalid
        """
        result = []
        self._buffer.extend(data)

        while True:
            if self._expected is None:
                if len(self._buffer) < self._length_struct.size:
                    break

                (length,) = self._length_struct.unpack_from(self._buffer)
                del self._buffer[: self._length_struct.size]
                if length % 4 != 0 or length > self.max_length:
                    self.reset()
                    raise InvalidFramingError(
                        f"Invalid packet length in stream: {length}"
                    )
                self._expected = length

            if len(self._buffer) < self._expected:
                break

            result.append(bytes(self._buffer[: self._expected]))
            del self._buffer[: self._expected]
            self._expected = None

        return result

    @property
    def pending(self) -> int:
        """Returns the number of bytes buffered for the next packet."""
        return len(self._buffer)

    def reset(self) -> None:
        """Discards all the data buffered in the parser."""
        self._buffer.clear()
        self._expected = None
