"""Networking-related utility functions used by the OSC transports."""

import socket
import trio.socket

from typing import Optional, Tuple

__all__ = ("create_async_socket", "format_socket_address")

IPAddressAndPort = Tuple[str, int]


def create_async_socket(socket_type) -> trio.socket.SocketType:
    """Creates an asynchronous socket with the given type.

    Asynchronous sockets have asynchronous sender and receiver methods so
    you need to use the `await` keyword with them.

    Parameters:
        socket_type: the type of the socket (``socket.SOCK_STREAM`` for
            TCP sockets, ``socket.SOCK_DGRAM`` for UDP sockets)

    Returns:
        the newly created socket
    """
    sock = trio.socket.socket(trio.socket.AF_INET, socket_type)
    sock.setsockopt(trio.socket.SOL_SOCKET, trio.socket.SO_REUSEADDR, 1)
    if hasattr(socket, "SO_REUSEPORT"):
        # Needed on macOS so a restarted server can bind to the same port
        # while the socket of the previous instance is still lingering
        sock.setsockopt(trio.socket.SOL_SOCKET, trio.socket.SO_REUSEPORT, 1)
    return sock


def format_socket_address(
    address: Optional[IPAddressAndPort], format: str = "{host}:{port}"
) -> str:
    """Formats an IP address and port in the standard hostname-port format.

    Parameters:
        address: the IP address and port to format; ``None`` is formatted as
            a question mark
        format: format string in brace-style that is used by
            ``str.format()``. The tokens ``{host}`` and ``{port}`` will be
            replaced by the hostname and port.
    """
    if address is None:
        return "?"
    host, port = address[:2]
    return format.format(host=host or "0.0.0.0", port=port)
