"""Typed arguments of OSC messages.

Each argument belongs to exactly one of the supported OSC argument types,
identified on the wire by a single type tag character.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import isfinite
from struct import Struct, error as StructError
from typing import Any, Callable, Dict, List

from .errors import (
    MalformedArgumentError,
    MalformedDataError,
    MalformedPacketError,
    UnsupportedTypeError,
)
from .timetag import TimeTag, decode_time_tag, encode_time_tag
from .wire import Reader, decode_blob, decode_string, encode_blob, encode_string

__all__ = (
    "Argument",
    "ArgumentType",
    "decode_arguments",
    "encode_argument",
    "type_tag_of",
)

_int32 = Struct(">i")
_int64 = Struct(">q")
_float32 = Struct(">f")
_float64 = Struct(">d")

FLOAT32_MAX = 3.4028234663852886e38
"""Largest finite value representable as a 32-bit float."""


class ArgumentType(Enum):
    """Enum representing the supported OSC argument types. The value of each
    member is its type tag character.
    """

    NIL = "N"
    INT32 = "i"
    FLOAT32 = "f"
    STRING = "s"
    BLOB = "b"
    TRUE = "T"
    FALSE = "F"
    INT64 = "h"
    FLOAT64 = "d"
    TIME_TAG = "t"

    @property
    def tag(self) -> str:
        """Returns the type tag character of the argument type."""
        return self.value

    @property
    def has_payload(self) -> bool:
        """Returns whether arguments of this type contribute bytes to the
        argument section of a message.
        """
        return self not in _TYPES_WITHOUT_PAYLOAD


_TYPES_WITHOUT_PAYLOAD = frozenset(
    (ArgumentType.NIL, ArgumentType.TRUE, ArgumentType.FALSE)
)


@dataclass(frozen=True)
class Argument:
    """A single typed OSC argument.

    Arguments are usually created from plain host values with `from_value()`,
    or explicitly with the factory class methods when the inferred type is not
    the desired one (e.g., 64-bit floats).
    """

    type: ArgumentType
    """The OSC type of the argument."""

    value: Any = None
    """The host value of the argument; `None` for nil arguments, `True` or
    `False` for boolean arguments.
    """

    def __post_init__(self) -> None:
        if not isinstance(self.type, ArgumentType):
            raise UnsupportedTypeError(f"Unknown OSC argument type: {self.type!r}")
        object.__setattr__(self, "value", _normalizers[self.type](self.value))

    @classmethod
    def nil(cls) -> Argument:
        return cls(ArgumentType.NIL)

    @classmethod
    def int32(cls, value: int) -> Argument:
        return cls(ArgumentType.INT32, value)

    @classmethod
    def int64(cls, value: int) -> Argument:
        return cls(ArgumentType.INT64, value)

    @classmethod
    def float32(cls, value: float) -> Argument:
        return cls(ArgumentType.FLOAT32, value)

    @classmethod
    def float64(cls, value: float) -> Argument:
        return cls(ArgumentType.FLOAT64, value)

    @classmethod
    def string(cls, value: str) -> Argument:
        return cls(ArgumentType.STRING, value)

    @classmethod
    def blob(cls, value: bytes) -> Argument:
        return cls(ArgumentType.BLOB, value)

    @classmethod
    def boolean(cls, value: bool) -> Argument:
        return cls(ArgumentType.TRUE if value else ArgumentType.FALSE, bool(value))

    @classmethod
    def time_tag(cls, value: TimeTag) -> Argument:
        return cls(ArgumentType.TIME_TAG, value)

    @classmethod
    def from_value(cls, value: Any) -> Argument:
        """Creates an OSC argument from a host value, inferring its type.

        Integers become 32-bit integers if they fit, 64-bit integers otherwise.
        Floats become 32-bit floats unless their magnitude is too large for a
        32-bit float. Argument_ instances are returned intact.

        Raises:
            UnsupportedTypeError: if the value has no OSC representation
        """
        if isinstance(value, Argument):
            return value
        elif value is None:
            return cls.nil()
        elif isinstance(value, bool):
            return cls.boolean(value)
        elif isinstance(value, int):
            if -(1 << 31) <= value < (1 << 31):
                return cls.int32(value)
            else:
                return cls.int64(value)
        elif isinstance(value, float):
            if isfinite(value) and abs(value) > FLOAT32_MAX:
                return cls.float64(value)
            else:
                return cls.float32(value)
        elif isinstance(value, str):
            return cls.string(value)
        elif isinstance(value, (bytes, bytearray, memoryview)):
            return cls.blob(value)
        elif isinstance(value, TimeTag):
            return cls.time_tag(value)
        else:
            raise UnsupportedTypeError(
                f"Argument type {type(value).__name__!r} not supported"
            )

    @property
    def tag(self) -> str:
        """Returns the type tag character of the argument."""
        return self.type.value

    def to_bytes(self) -> bytes:
        """Returns the encoded payload of the argument."""
        return _encoders[self.type](self.value)


def _expect(types, name: str) -> Callable[[Any], Any]:
    def normalizer(value):
        if isinstance(value, bool) or not isinstance(value, types):
            raise UnsupportedTypeError(
                f"{name} argument expected, got {type(value).__name__!r}"
            )
        return value

    return normalizer


def _int_in_range(bits: int) -> Callable[[Any], int]:
    check = _expect(int, f"{bits}-bit integer")
    low, high = -(1 << (bits - 1)), 1 << (bits - 1)

    def normalizer(value):
        value = check(value)
        if not low <= value < high:
            raise UnsupportedTypeError(
                f"Integer {value} does not fit into a {bits}-bit OSC argument"
            )
        return int(value)

    return normalizer


def _normalize_float32(value: Any) -> float:
    value = float(_expect((int, float), "32-bit float")(value))
    try:
        # Round to single precision so decoded arguments compare equal
        return _float32.unpack(_float32.pack(value))[0]
    except (OverflowError, StructError) as ex:
        raise UnsupportedTypeError(
            f"Float {value} does not fit into a 32-bit OSC argument"
        ) from ex


def _normalize_string(value: Any) -> str:
    value = _expect(str, "String")(value)
    if "\x00" in value:
        raise UnsupportedTypeError("OSC strings must not contain NUL characters")
    return value


def _normalize_blob(value: Any) -> bytes:
    return bytes(_expect((bytes, bytearray, memoryview), "Blob")(value))


def _normalize_fixed(expected: Any) -> Callable[[Any], Any]:
    def normalizer(value):
        if value is not expected:
            raise UnsupportedTypeError(
                f"{expected!r} expected for this argument type, got {value!r}"
            )
        return value

    return normalizer


_normalizers: Dict[ArgumentType, Callable[[Any], Any]] = {
    ArgumentType.NIL: _normalize_fixed(None),
    ArgumentType.INT32: _int_in_range(32),
    ArgumentType.FLOAT32: _normalize_float32,
    ArgumentType.STRING: _normalize_string,
    ArgumentType.BLOB: _normalize_blob,
    ArgumentType.TRUE: _normalize_fixed(True),
    ArgumentType.FALSE: _normalize_fixed(False),
    ArgumentType.INT64: _int_in_range(64),
    ArgumentType.FLOAT64: lambda value: float(
        _expect((int, float), "64-bit float")(value)
    ),
    ArgumentType.TIME_TAG: _expect(TimeTag, "Time tag"),
}

_encoders: Dict[ArgumentType, Callable[[Any], bytes]] = {
    ArgumentType.NIL: lambda _: b"",
    ArgumentType.INT32: _int32.pack,
    ArgumentType.FLOAT32: _float32.pack,
    ArgumentType.STRING: encode_string,
    ArgumentType.BLOB: encode_blob,
    ArgumentType.TRUE: lambda _: b"",
    ArgumentType.FALSE: lambda _: b"",
    ArgumentType.INT64: _int64.pack,
    ArgumentType.FLOAT64: _float64.pack,
    ArgumentType.TIME_TAG: encode_time_tag,
}

_decoders: Dict[str, Callable[[Reader], Any]] = {
    "N": lambda _: None,
    "i": lambda reader: reader.read_struct(_int32)[0],
    "f": lambda reader: reader.read_struct(_float32)[0],
    "s": decode_string,
    "b": decode_blob,
    "T": lambda _: True,
    "F": lambda _: False,
    "h": lambda reader: reader.read_struct(_int64)[0],
    "d": lambda reader: reader.read_struct(_float64)[0],
    "t": decode_time_tag,
}


def type_tag_of(value: Any) -> str:
    """Returns the type tag character of the given argument or host value.

    Raises:
        UnsupportedTypeError: if the value has no OSC representation
    """
    return Argument.from_value(value).tag


def encode_argument(value: Any) -> bytes:
    """Encodes the payload of the given argument or host value. Nil and
    boolean arguments have no payload.

    Raises:
        UnsupportedTypeError: if the value has no OSC representation
    """
    return Argument.from_value(value).to_bytes()


def decode_arguments(type_tags: str, reader: Reader) -> List[Argument]:
    """Decodes the arguments described by an OSC type tag string from the
    current position of the reader.

    Parameters:
        type_tags: the type tag string; must start with a comma
        reader: the reader to decode the argument payloads from

    Returns:
        the decoded arguments, in the order of their type tags

    Raises:
        MalformedPacketError: if the type tag string does not start with a comma
        MalformedArgumentError: if a type tag is not supported or its payload
            cannot be decoded
    """
    if not type_tags.startswith(","):
        raise MalformedPacketError("Malformed type tag string")

    result = []
    for tag in type_tags[1:]:
        decoder = _decoders.get(tag)
        if decoder is None:
            raise MalformedArgumentError(f"Unsupported type tag: {tag!r}")

        try:
            value = decoder(reader)
        except MalformedDataError as ex:
            raise MalformedArgumentError(
                f"Malformed argument with type tag {tag!r}: {ex}"
            ) from ex

        result.append(Argument(ArgumentType(tag), value))

    return result
