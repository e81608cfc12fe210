"""Implementation of the Open Sound Control (OSC) 1.0 wire protocol:
encoding and decoding of OSC messages and bundles, and an address space that
dispatches incoming messages to handlers based on OSC address patterns.
"""

from .address_space import AddressSpace, OSCMethod, compile_address_pattern
from .arguments import Argument, ArgumentType, type_tag_of
from .bundle import OSCBundle
from .errors import (
    InvalidFramingError,
    InvalidPatternError,
    MalformedArgumentError,
    MalformedBundleError,
    MalformedDataError,
    MalformedPacketError,
    NotConnectedError,
    OSCError,
    UnrecognizedPacketError,
    UnsupportedTypeError,
)
from .message import OSCMessage
from .packet import decode_packet, encode_packet, frame, frame_packet
from .timetag import TimeTag
from .types import MessageHandler, OSCAddress, OSCPacket, OSCValue
from .version import __version__

__all__ = (
    "AddressSpace",
    "Argument",
    "ArgumentType",
    "InvalidFramingError",
    "InvalidPatternError",
    "MalformedArgumentError",
    "MalformedBundleError",
    "MalformedDataError",
    "MalformedPacketError",
    "MessageHandler",
    "NotConnectedError",
    "OSCAddress",
    "OSCBundle",
    "OSCError",
    "OSCMessage",
    "OSCMethod",
    "OSCPacket",
    "OSCValue",
    "TimeTag",
    "UnrecognizedPacketError",
    "UnsupportedTypeError",
    "__version__",
    "compile_address_pattern",
    "decode_packet",
    "encode_packet",
    "frame",
    "frame_packet",
    "type_tag_of",
)
