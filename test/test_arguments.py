from pytest import mark, raises

from flockwave.osc.arguments import (
    Argument,
    ArgumentType,
    decode_arguments,
    encode_argument,
    type_tag_of,
)
from flockwave.osc.errors import (
    MalformedArgumentError,
    MalformedDataError,
    MalformedPacketError,
    UnsupportedTypeError,
)
from flockwave.osc.timetag import TimeTag
from flockwave.osc.wire import Reader


@mark.parametrize(
    "value,tag",
    [
        (None, "N"),
        (42, "i"),
        (-(1 << 31), "i"),
        (1 << 31, "h"),
        (-(1 << 63), "h"),
        (440.0, "f"),
        (1e300, "d"),
        ("hello", "s"),
        (b"\x01\x02", "b"),
        (bytearray(b"\x01"), "b"),
        (True, "T"),
        (False, "F"),
        (TimeTag.immediate(), "t"),
        (Argument.float64(1.5), "d"),
    ],
)
def test_type_tag_of(value, tag):
    assert type_tag_of(value) == tag


@mark.parametrize("value", [[1, 2], {"a": 1}, object(), 1 << 64, 3 + 4j])
def test_type_tag_of_unsupported_values(value):
    with raises(UnsupportedTypeError):
        type_tag_of(value)


def test_explicit_constructors_validate_values():
    with raises(UnsupportedTypeError):
        Argument.int32(1 << 31)
    with raises(UnsupportedTypeError):
        Argument.int32(True)
    with raises(UnsupportedTypeError):
        Argument.float32(1e300)
    with raises(UnsupportedTypeError):
        Argument.string(b"bytes")
    with raises(UnsupportedTypeError):
        Argument.string("nul\x00inside")
    with raises(UnsupportedTypeError):
        Argument(ArgumentType.TRUE, False)
    with raises(UnsupportedTypeError):
        Argument("i", 5)


def test_float32_values_are_rounded_to_single_precision():
    arg = Argument.float32(0.1)
    assert arg.value != 0.1
    assert abs(arg.value - 0.1) < 1e-8
    assert Argument.float64(0.1).value == 0.1


def test_has_payload():
    assert not ArgumentType.NIL.has_payload
    assert not ArgumentType.TRUE.has_payload
    assert not ArgumentType.FALSE.has_payload
    assert ArgumentType.INT32.has_payload
    assert ArgumentType.TIME_TAG.has_payload


def test_encode_argument():
    assert encode_argument(None) == b""
    assert encode_argument(True) == b""
    assert encode_argument(False) == b""
    assert encode_argument(1) == b"\x00\x00\x00\x01"
    assert encode_argument(-2) == b"\xff\xff\xff\xfe"
    assert encode_argument(440.0) == b"\x43\xdc\x00\x00"
    assert encode_argument(Argument.int64(1)) == b"\x00" * 7 + b"\x01"
    assert encode_argument(Argument.float64(1.0)) == b"\x3f\xf0" + b"\x00" * 6
    assert encode_argument("hi") == b"hi\x00\x00"
    assert encode_argument(b"arg") == b"\x00\x00\x00\x03arg\x00"
    assert encode_argument(TimeTag.immediate()) == b"\x00" * 7 + b"\x01"


def test_encode_unsupported_argument():
    with raises(UnsupportedTypeError):
        encode_argument(object())


def test_decode_arguments():
    data = (
        b"\x00\x00\x00\x01"
        + b"\x43\xdc\x00\x00"
        + b"hi\x00\x00"
        + b"\x00\x00\x00\x03arg\x00"
        + b"\x00" * 7
        + b"\x02"
        + b"\x3f\xf0"
        + b"\x00" * 6
        + b"\x00" * 7
        + b"\x01"
    )
    args = decode_arguments(",ifsbNTFhdt", Reader(data))

    assert args == [
        Argument.int32(1),
        Argument.float32(440.0),
        Argument.string("hi"),
        Argument.blob(b"arg"),
        Argument.nil(),
        Argument.boolean(True),
        Argument.boolean(False),
        Argument.int64(2),
        Argument.float64(1.0),
        Argument.time_tag(TimeTag.immediate()),
    ]
    assert args[6].value is False


def test_decode_arguments_requires_comma():
    with raises(MalformedPacketError):
        decode_arguments("i", Reader(b"\x00\x00\x00\x01"))


def test_decode_arguments_unknown_tag():
    with raises(MalformedArgumentError, match="Unsupported type tag"):
        decode_arguments(",iX", Reader(b"\x00\x00\x00\x01"))


def test_decode_arguments_short_read():
    with raises(MalformedArgumentError):
        decode_arguments(",ii", Reader(b"\x00\x00\x00\x01"))

    # Truncated blob
    with raises(MalformedDataError):
        decode_arguments(",b", Reader(b"\x00\x00\x00\x10abcd"))
