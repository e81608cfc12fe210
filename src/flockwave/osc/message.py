from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List

from .arguments import Argument, decode_arguments, encode_argument, type_tag_of
from .types import OSCAddress
from .wire import Reader, decode_string, encode_string

__all__ = ("OSCMessage",)


@dataclass
class OSCMessage:
    """Data class representing an OSC message.

    Host values passed in the argument list at construction time are converted
    into Argument_ instances, inferring their OSC types.
    """

    #: The OSC address where the message was (or will be) sent to
    address: OSCAddress = "/"

    #: The arguments of the OSC message
    arguments: List[Argument] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.arguments = [Argument.from_value(value) for value in self.arguments]

    @classmethod
    def from_bytes(cls, data: bytes) -> OSCMessage:
        """Decodes an OSC message from its wire representation.

        Raises:
            MalformedDataError: if the address or the type tag string is
                malformed
            MalformedPacketError: if the type tag string does not start with
                a comma
            MalformedArgumentError: if the arguments do not match the type
                tag string
        """
        reader = Reader(data)
        address = decode_string(reader)
        type_tags = decode_string(reader)
        return cls(address, decode_arguments(type_tags, reader))

    @property
    def address_parts(self) -> List[str]:
        """Returns the individual parts of the address, split at slashes."""
        return self.address.split("/")

    @property
    def type_tag_string(self) -> str:
        """Returns the OSC type tag string of the arguments of the message.

        Raises:
            UnsupportedTypeError: if one of the arguments has no OSC
                representation
        """
        return "," + "".join(type_tag_of(arg) for arg in self.arguments)

    @property
    def values(self) -> List[Any]:
        """Returns the host values of the arguments of the message."""
        return [Argument.from_value(arg).value for arg in self.arguments]

    def add_argument(self, value: Any) -> Argument:
        """Appends an argument to the message.

        The message is left intact if the value has no OSC representation.

        Returns:
            the argument that was appended

        Raises:
            UnsupportedTypeError: if the value has no OSC representation
        """
        arg = Argument.from_value(value)
        self.arguments.append(arg)
        return arg

    def add_arguments(self, values: Iterable[Any]) -> None:
        """Appends multiple arguments to the message. Either all of them are
        appended or none of them.

        Raises:
            UnsupportedTypeError: if one of the values has no OSC representation
        """
        args = [Argument.from_value(value) for value in values]
        self.arguments.extend(args)

    def to_bytes(self) -> bytes:
        """Encodes the message into its wire representation.

        Raises:
            UnsupportedTypeError: if one of the arguments has no OSC
                representation
        """
        parts = [encode_string(self.address), encode_string(self.type_tag_string)]
        parts.extend(encode_argument(arg) for arg in self.arguments)
        return b"".join(parts)

    def __str__(self) -> str:
        values = ", ".join(repr(value) for value in self.values)
        return f"Message{{Address: {self.address}, Arguments: [{values}]}}"
