"""OSC servers that receive packets over UDP or TCP, decode them and dispatch
the decoded messages to the handlers registered in an address space.

Each incoming packet is decoded and dispatched in a worker thread so a slow
handler stalls only the packet that invoked it. Malformed packets are logged
and dropped; they never terminate the server.
"""

from __future__ import annotations

import trio.socket

from contextlib import closing
from functools import partial
from trio import (
    BrokenResourceError,
    CapacityLimiter,
    ClosedResourceError,
    SocketStream,
    TASK_STATUS_IGNORED,
    open_nursery,
    open_tcp_listeners,
    serve_listeners,
    to_thread,
)
from typing import Optional

from .address_space import AddressSpace, OSCMethod
from .bundle import OSCBundle
from .channels import ParserChannel
from .config import HOST, POOL_SIZE, PORT, UDP_READ_BUFFER_SIZE
from .errors import InvalidFramingError, OSCError
from .logger import log as base_log
from .networking import IPAddressAndPort, create_async_socket, format_socket_address
from .packet import decode_packet
from .parsers import LengthPrefixedParser
from .types import MessageHandler, OSCAddress

__all__ = ("OSCTCPServer", "OSCUDPServer", "handle_incoming_data")

log = base_log.getChild("server")


def handle_incoming_data(
    address_space: AddressSpace,
    data: bytes,
    sender: Optional[IPAddressAndPort] = None,
) -> int:
    """Decodes a single packet received from a transport and dispatches it to
    the given address space if it is a message.

    Malformed packets and bundles are logged and dropped.

    Parameters:
        address_space: the address space to dispatch the message to
        data: the raw bytes of the packet
        sender: the address of the sender, for logging purposes

    Returns:
        the number of handlers that were invoked
    """
    try:
        packet = decode_packet(data)
    except OSCError as ex:
        log.warning(
            f"Dropped malformed packet from {format_socket_address(sender)}: {ex}"
        )
        return 0

    if isinstance(packet, OSCBundle):
        log.warning(
            f"Dropped bundle from {format_socket_address(sender)}, "
            "bundles are not dispatched"
        )
        return 0

    log.debug(f"Received {packet} from {format_socket_address(sender)}")
    return address_space.dispatch(packet)


class OSCServerBase:
    """Base class for OSC servers that own an address space and dispatch the
    incoming packets to it.
    """

    address_space: AddressSpace

    def __init__(
        self,
        host: str = HOST,
        port: int = PORT,
        *,
        address_space: Optional[AddressSpace] = None,
        pool_size: int = POOL_SIZE,
    ):
        """Constructor.

        Parameters:
            host: the IP address or hostname that the server binds to. The
                default value means that the server will bind to all IP
                addresses of the local machine.
            port: the port number that the server listens on. Zero means that
                the server will choose a random ephemeral port number.
            address_space: the address space to dispatch the incoming
                messages to; a new one is created if omitted
            pool_size: maximum number of packets to process concurrently
        """
        self.address_space = (
            address_space if address_space is not None else AddressSpace()
        )
        self._address = (host or "", port or 0)
        self._bound_address: Optional[IPAddressAndPort] = None
        self._limit = CapacityLimiter(pool_size)

    @property
    def address(self) -> IPAddressAndPort:
        """Returns the IP address and port that the server is bound to, or
        the requested address and port if the server is not running yet.
        """
        return self._bound_address or self._address

    def handle(self, pattern: OSCAddress, handler: MessageHandler) -> OSCMethod:
        """Registers a handler function for the given address pattern in the
        address space of the server.
        """
        return self.address_space.handle(pattern, handler)

    async def _handle_data_safely(
        self, data: bytes, sender: Optional[IPAddressAndPort]
    ) -> None:
        """Handles a single incoming packet in a worker thread, ensuring that
        exceptions raised by the handlers do not propagate through and the
        number of packets being processed concurrently is limited.
        """
        try:
            await to_thread.run_sync(
                handle_incoming_data,
                self.address_space,
                data,
                sender,
                limiter=self._limit,
            )
        except Exception as ex:
            log.exception(ex)


class OSCUDPServer(OSCServerBase):
    """OSC server that receives packets in UDP datagrams, one packet per
    datagram.
    """

    async def serve(self, *, task_status=TASK_STATUS_IGNORED) -> None:
        """Binds the server socket and handles incoming datagrams until the
        task is cancelled.

        Can be started with ``nursery.start()``; the address that the server
        is bound to is reported back as the start value.
        """
        sock = create_async_socket(trio.socket.SOCK_DGRAM)
        with closing(sock):
            await sock.bind(self._address)
            self._bound_address = sock.getsockname()[:2]

            log.info(
                f"OSC UDP server listening on {format_socket_address(self.address)}"
            )
            task_status.started(self.address)

            try:
                async with open_nursery() as nursery:
                    while True:
                        data, sender = await sock.recvfrom(UDP_READ_BUFFER_SIZE)
                        nursery.start_soon(self._handle_data_safely, data, sender)
            finally:
                self._bound_address = None
                log.info("OSC UDP server stopped")


class OSCTCPServer(OSCServerBase):
    """OSC server that accepts TCP connections where each packet is preceded
    by its length as a big-endian 32-bit integer.
    """

    async def serve(self, *, task_status=TASK_STATUS_IGNORED) -> None:
        """Starts listening for incoming TCP connections and handles them
        until the task is cancelled.

        Can be started with ``nursery.start()``; the address that the server
        is bound to is reported back as the start value.
        """
        host, port = self._address
        listeners = await open_tcp_listeners(port, host=host or None)
        self._bound_address = listeners[0].socket.getsockname()[:2]

        log.info(f"OSC TCP server listening on {format_socket_address(self.address)}")
        task_status.started(self.address)

        try:
            await serve_listeners(self._handle_connection_safely, listeners)
        finally:
            self._bound_address = None
            log.info("OSC TCP server stopped")

    async def _handle_connection(self, stream: SocketStream) -> None:
        """Handles a connection from a single client until the client closes
        the connection or sends data that is out of sync with the framing.
        """
        peer = stream.socket.getpeername()[:2]
        log.info(f"Accepted OSC TCP connection from {format_socket_address(peer)}")

        channel = ParserChannel(
            stream.receive_some, LengthPrefixedParser(), stream.aclose
        )
        async with channel:
            async with open_nursery() as nursery:
                handler = partial(self._handle_data_safely, sender=peer)
                try:
                    async for data in channel:
                        nursery.start_soon(handler, data)
                except BrokenResourceError:
                    # This is okay, the other side closed the connection
                    pass
                except ClosedResourceError:
                    # This is okay, we closed the connection
                    pass
                except InvalidFramingError as ex:
                    log.warning(
                        f"Closing OSC TCP connection from "
                        f"{format_socket_address(peer)}: {ex}"
                    )

        log.info(f"OSC TCP connection from {format_socket_address(peer)} closed")

    async def _handle_connection_safely(self, stream: SocketStream) -> None:
        """Handles a connection from a single client, ensuring that
        exceptions do not propagate through.
        """
        try:
            return await self._handle_connection(stream)
        except Exception as ex:
            # Exceptions raised during a connection are caught and logged here;
            # we do not let the main task itself crash because of them
            log.exception(ex)
