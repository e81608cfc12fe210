from __future__ import annotations

from dataclasses import dataclass, field
from struct import Struct
from typing import List, TYPE_CHECKING

from .config import MAX_BUNDLE_DEPTH
from .errors import MalformedBundleError, OSCError, UnsupportedTypeError
from .message import OSCMessage
from .timetag import TimeTag, decode_time_tag, encode_time_tag
from .wire import Reader

if TYPE_CHECKING:
    from .types import OSCPacket

__all__ = ("OSCBundle",)

BUNDLE_IDENTIFIER = b"#bundle\x00"
"""Literal bytes that every encoded OSC bundle starts with."""

_uint32 = Struct(">I")


@dataclass
class OSCBundle:
    """Data class representing an OSC bundle: a time tag and an ordered list
    of child packets, each of which is either a message or another bundle.
    """

    #: The time tag of the bundle; immediate by default
    time_tag: TimeTag = field(default_factory=TimeTag.immediate)

    #: The child packets of the bundle
    elements: List[OSCPacket] = field(default_factory=list)

    @classmethod
    def from_bytes(
        cls, data: bytes, *, max_depth: int = MAX_BUNDLE_DEPTH
    ) -> OSCBundle:
        """Decodes an OSC bundle from its wire representation.

        Parameters:
            data: the encoded bundle
            max_depth: the maximum number of nested bundle levels to accept,
                including this one

        Raises:
            MalformedBundleError: if the bundle identifier or the time tag is
                missing, if a child element is truncated or cannot be decoded,
                or if the bundles are nested too deeply
        """
        from .packet import decode_packet

        if max_depth < 1:
            raise MalformedBundleError("OSC bundles are nested too deeply")

        reader = Reader(data)
        try:
            identifier = reader.read(len(BUNDLE_IDENTIFIER))
            if identifier != BUNDLE_IDENTIFIER:
                raise MalformedBundleError("Missing OSC bundle identifier")
            time_tag = decode_time_tag(reader)

            elements = []
            while not reader.at_end:
                (length,) = reader.read_struct(_uint32)
                element = reader.read(length)
                elements.append(decode_packet(element, max_depth=max_depth - 1))
        except MalformedBundleError:
            raise
        except OSCError as ex:
            raise MalformedBundleError(f"Malformed OSC bundle: {ex}") from ex

        return cls(time_tag, elements)

    def add_packet(self, packet: OSCPacket) -> None:
        """Appends a message or a bundle to the elements of the bundle."""
        self.elements.append(packet)

    def to_bytes(self) -> bytes:
        """Encodes the bundle into its wire representation.

        Raises:
            UnsupportedTypeError: if one of the elements is neither a message
                nor a bundle, or if a message in the bundle has an argument
                without an OSC representation
        """
        parts = [BUNDLE_IDENTIFIER, encode_time_tag(self.time_tag)]
        for element in self.elements:
            if not isinstance(element, (OSCMessage, OSCBundle)):
                raise UnsupportedTypeError(
                    f"OSC bundles cannot contain {type(element).__name__!r}"
                )
            encoded = element.to_bytes()
            parts.append(_uint32.pack(len(encoded)))
            parts.append(encoded)
        return b"".join(parts)

    def __str__(self) -> str:
        elements = ", ".join(str(element) for element in self.elements)
        return f"Bundle{{{self.time_tag}, Elements: [{elements}]}}"
