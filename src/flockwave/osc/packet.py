"""Functions that operate on OSC packets, i.e. messages and bundles."""

from struct import Struct

from .bundle import OSCBundle
from .config import MAX_BUNDLE_DEPTH
from .errors import InvalidFramingError, UnrecognizedPacketError, UnsupportedTypeError
from .message import OSCMessage
from .types import OSCPacket

__all__ = ("decode_packet", "encode_packet", "frame", "frame_packet")

_uint32 = Struct(">I")


def decode_packet(data: bytes, *, max_depth: int = MAX_BUNDLE_DEPTH) -> OSCPacket:
    """Decodes an OSC packet received from a transport.

    The first byte of the packet decides whether it is decoded as a message
    (``/``) or as a bundle (``#``).

    Parameters:
        data: the raw bytes of the packet
        max_depth: the maximum number of nested bundle levels to accept

    Returns:
        the decoded message or bundle

    Raises:
        InvalidFramingError: if the packet is empty or its length is not a
            multiple of four
        UnrecognizedPacketError: if the packet is neither a message nor a
            bundle
        MalformedDataError: if the message or bundle itself is malformed
    """
    if not data or len(data) % 4 != 0:
        raise InvalidFramingError(
            f"Packet length is not a positive multiple of 4 bytes: {len(data)}"
        )

    first = data[:1]
    if first == b"/":
        return OSCMessage.from_bytes(data)
    elif first == b"#":
        return OSCBundle.from_bytes(data, max_depth=max_depth)
    else:
        raise UnrecognizedPacketError(f"Unrecognized OSC packet type: {first!r}")


def encode_packet(packet: OSCPacket) -> bytes:
    """Encodes an OSC message or bundle into its wire representation.

    Raises:
        UnsupportedTypeError: if the packet is neither a message nor a bundle,
            or contains an argument without an OSC representation
    """
    if not isinstance(packet, (OSCMessage, OSCBundle)):
        raise UnsupportedTypeError(
            f"OSC message or bundle expected, got {type(packet).__name__!r}"
        )
    return packet.to_bytes()


def frame(data: bytes) -> bytes:
    """Prefixes an encoded packet with its length as a big-endian 32-bit
    integer, as required by stream-oriented transports.
    """
    return _uint32.pack(len(data)) + data


def frame_packet(packet: OSCPacket) -> bytes:
    """Encodes an OSC message or bundle and prefixes it with its length."""
    return frame(encode_packet(packet))
