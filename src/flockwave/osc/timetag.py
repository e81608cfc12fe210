"""OSC time tags: 64-bit fixed point timestamps relative to the OSC epoch
(1900-01-01), with a distinguished value meaning "immediately".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from struct import Struct
from time import time_ns
from typing import ClassVar, Tuple

from .wire import Reader

__all__ = ("TimeTag", "decode_time_tag", "encode_time_tag")

UNIX_OSC_EPOCH_OFFSET = 2208988800
"""Number of seconds between the OSC epoch (1900) and the UNIX epoch (1970)."""

NANOS_PER_SECOND = 1000000000
"""Number of nanoseconds in a second."""

IMMEDIATE = 1
"""Encoded value of the time tag that represents immediate execution."""

_uint64 = Struct(">Q")


@dataclass(frozen=True, eq=False)
class TimeTag:
    """Immutable OSC time tag.

    The low word of the encoded time tag stores the sub-second part of the
    timestamp in nanoseconds, not as a binary fraction of a second.
    """

    seconds: int = 0
    """Number of whole seconds since the OSC epoch."""

    fraction: int = 0
    """Sub-second part of the timestamp (nanoseconds)."""

    is_immediate: bool = False
    """Whether the time tag means "execute immediately"."""

    _MASK: ClassVar[int] = 0xFFFFFFFF

    def __post_init__(self) -> None:
        if not 0 <= self.seconds <= self._MASK:
            raise ValueError(f"time tag seconds out of range: {self.seconds}")
        if not 0 <= self.fraction <= self._MASK:
            raise ValueError(f"time tag fraction out of range: {self.fraction}")

    @classmethod
    def immediate(cls) -> TimeTag:
        """Returns a time tag that represents immediate execution."""
        return cls(is_immediate=True)

    @classmethod
    def from_unix_nanoseconds(cls, value: int) -> TimeTag:
        """Creates a time tag from a UNIX timestamp given in nanoseconds."""
        seconds, nanos = divmod(
            value + UNIX_OSC_EPOCH_OFFSET * NANOS_PER_SECOND, NANOS_PER_SECOND
        )
        return cls(seconds=seconds, fraction=nanos)

    @classmethod
    def from_unix(cls, value: float) -> TimeTag:
        """Creates a time tag from a UNIX timestamp given in seconds."""
        return cls.from_unix_nanoseconds(round(value * NANOS_PER_SECOND))

    @classmethod
    def from_datetime(cls, value: datetime) -> TimeTag:
        """Creates a time tag from a datetime object. Naive datetime objects
        are assumed to be in UTC.
        """
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        delta = value - datetime(1970, 1, 1, tzinfo=timezone.utc)
        nanos = (
            delta.days * 86400 + delta.seconds
        ) * NANOS_PER_SECOND + delta.microseconds * 1000
        return cls.from_unix_nanoseconds(nanos)

    @classmethod
    def now(cls) -> TimeTag:
        """Returns a time tag representing the current time."""
        return cls.from_unix_nanoseconds(time_ns())

    def to_unix_nanoseconds(self) -> int:
        """Returns the UNIX timestamp of the time tag in nanoseconds.

        Immediate time tags are converted to the current time.
        """
        if self.is_immediate:
            return time_ns()
        return (
            self.seconds - UNIX_OSC_EPOCH_OFFSET
        ) * NANOS_PER_SECOND + self.fraction

    def to_unix(self) -> float:
        """Returns the UNIX timestamp of the time tag in seconds.

        Immediate time tags are converted to the current time.
        """
        return self.to_unix_nanoseconds() / NANOS_PER_SECOND

    def to_datetime(self) -> datetime:
        """Returns the time tag as a timezone-aware datetime object in UTC,
        truncated to microsecond precision.

        Immediate time tags are converted to the current time.
        """
        seconds, nanos = divmod(self.to_unix_nanoseconds(), NANOS_PER_SECOND)
        return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(
            microsecond=nanos // 1000
        )

    def to_int(self) -> int:
        """Returns the 64-bit integer representation of the time tag."""
        if self.is_immediate:
            return IMMEDIATE
        return (self.seconds << 32) | self.fraction

    def __eq__(self, other) -> bool:
        if not isinstance(other, TimeTag):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def _key(self) -> Tuple[bool, int]:
        # Immediate tags are equal to each other regardless of their fields
        return self.is_immediate, self.to_int()

    def __str__(self) -> str:
        if self.is_immediate:
            return "TimeTag: (immediate)"
        else:
            seconds, nanos = divmod(self.to_unix_nanoseconds(), NANOS_PER_SECOND)
            stamp = datetime.fromtimestamp(seconds, tz=timezone.utc)
            return f"TimeTag: {stamp:%Y-%m-%d %H:%M:%S}.{nanos:09d} UTC"


def encode_time_tag(time_tag: TimeTag) -> bytes:
    """Encodes a time tag into its 8-byte big-endian wire representation."""
    return _uint64.pack(time_tag.to_int())


def decode_time_tag(reader: Reader) -> TimeTag:
    """Decodes a time tag from the current position of the reader.

    Raises:
        MalformedDataError: if there are fewer than eight bytes left
    """
    (value,) = reader.read_struct(_uint64)
    if value == IMMEDIATE:
        return TimeTag.immediate()
    else:
        return TimeTag(seconds=value >> 32, fraction=value & TimeTag._MASK)
