"""Exception classes raised by the OSC codec, the address space and the
transports.
"""

__all__ = (
    "InvalidFramingError",
    "InvalidPatternError",
    "MalformedArgumentError",
    "MalformedBundleError",
    "MalformedDataError",
    "MalformedPacketError",
    "NotConnectedError",
    "OSCError",
    "UnrecognizedPacketError",
    "UnsupportedTypeError",
)


class OSCError(RuntimeError):
    """Base class for all OSC-related errors."""

    default_message = "OSC error"

    def __init__(self, message=None):
        """Constructor.

        Parameters:
            message (Optional[str]): the error message
        """
        super().__init__(message or self.default_message)


class UnsupportedTypeError(OSCError, TypeError):
    """Exception raised when a host value cannot be represented by any of the
    supported OSC argument types.
    """

    default_message = "Unsupported OSC argument type"


class MalformedDataError(OSCError, ValueError):
    """Exception raised when the binary representation of an OSC string, blob
    or time tag violates the wire format (bad padding, truncated data).
    """

    default_message = "Malformed OSC data"


class MalformedPacketError(MalformedDataError):
    """Exception raised when an OSC packet as a whole is malformed."""

    default_message = "Malformed OSC packet"


class MalformedArgumentError(MalformedDataError):
    """Exception raised when the arguments of an OSC message do not match its
    type tag string.
    """

    default_message = "Malformed OSC argument"


class MalformedBundleError(MalformedDataError):
    """Exception raised when an OSC bundle or one of its elements cannot be
    decoded.
    """

    default_message = "Malformed OSC bundle"


class InvalidFramingError(MalformedPacketError):
    """Exception raised when the length of an OSC packet is zero or is not a
    multiple of four bytes.
    """

    default_message = "OSC packet length is not a positive multiple of 4 bytes"


class UnrecognizedPacketError(MalformedPacketError):
    """Exception raised when the first byte of an OSC packet identifies neither
    a message nor a bundle.
    """

    default_message = "Unrecognized OSC packet"


class InvalidPatternError(OSCError, ValueError):
    """Exception raised when an OSC address pattern cannot be compiled into a
    matcher.
    """

    default_message = "Invalid OSC address pattern"


class NotConnectedError(OSCError):
    """Exception raised when a client attempts to send a packet before it is
    connected to its remote peer.
    """

    default_message = "Client is not connected"
