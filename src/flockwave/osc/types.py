from __future__ import annotations

from typing import Any, Callable, TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .arguments import Argument
    from .bundle import OSCBundle
    from .message import OSCMessage
    from .timetag import TimeTag

__all__ = ("MessageHandler", "OSCAddress", "OSCPacket", "OSCValue")

#: Type alias for OSC addresses and address patterns
OSCAddress = str

#: Type specification for host values that can be turned into OSC arguments
OSCValue = Union[
    None, bool, int, float, str, bytes, bytearray, "TimeTag", "Argument"
]

#: Type specification for OSC packets; a packet is either a message or a bundle
OSCPacket = Union["OSCMessage", "OSCBundle"]

#: Type specification for functions that handle OSC messages dispatched from
#: an address space
MessageHandler = Callable[["OSCMessage"], Any]
