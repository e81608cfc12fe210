"""OSC clients that send packets to a remote host over UDP or TCP."""

from __future__ import annotations

import trio.socket

from trio import (
    BrokenResourceError,
    ClosedResourceError,
    Lock,
    SocketStream,
    open_tcp_stream,
    to_thread,
)
from typing import Optional

from .address_space import AddressSpace, OSCMethod
from .channels import ParserChannel
from .errors import InvalidFramingError, NotConnectedError
from .logger import log as base_log
from .networking import IPAddressAndPort, create_async_socket, format_socket_address
from .packet import encode_packet, frame_packet
from .parsers import LengthPrefixedParser
from .server import handle_incoming_data
from .types import MessageHandler, OSCAddress, OSCPacket

__all__ = ("OSCTCPClient", "OSCUDPClient")

log = base_log.getChild("client")


class OSCUDPClient:
    """OSC client that sends each packet in a separate UDP datagram."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        local_address: Optional[IPAddressAndPort] = None,
    ):
        """Constructor.

        Parameters:
            host: the IP address or hostname of the remote host
            port: the port of the remote host
            local_address: the local IP address and port to send the packets
                from; `None` means an ephemeral port on all interfaces
        """
        self.address = (host, port)
        self.local_address = local_address
        self._socket: Optional[trio.socket.SocketType] = None

    @property
    def is_connected(self) -> bool:
        """Returns whether the client is connected to the remote host."""
        return self._socket is not None

    async def connect(self) -> None:
        """Creates the socket of the client and connects it to the remote
        host. No-op if the client is connected already.
        """
        if self._socket is not None:
            return

        sock = create_async_socket(trio.socket.SOCK_DGRAM)
        try:
            if self.local_address is not None:
                await sock.bind(self.local_address)
            await sock.connect(self.address)
        except Exception:
            sock.close()
            raise

        self._socket = sock

    async def disconnect(self) -> None:
        """Closes the socket of the client. No-op if the client is not
        connected.
        """
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    async def send(self, packet: OSCPacket) -> None:
        """Sends an OSC message or bundle to the remote host.

        Raises:
            NotConnectedError: if the client is not connected
            UnsupportedTypeError: if the packet cannot be encoded
        """
        if self._socket is None:
            raise NotConnectedError()

        await self._socket.send(encode_packet(packet))


class OSCTCPClient:
    """OSC client that streams length-prefixed packets to a remote host over
    TCP.

    The client also owns an address space that receives the messages sent
    back by the remote host on the same stream while `run_response_reader()`
    is running.
    """

    address_space: AddressSpace

    def __init__(
        self,
        host: str,
        port: int,
        *,
        address_space: Optional[AddressSpace] = None,
        local_address: Optional[str] = None,
    ):
        """Constructor.

        Parameters:
            host: the IP address or hostname of the remote host
            port: the port of the remote host
            address_space: the address space to dispatch the responses to; a
                new one is created if omitted
            local_address: the local IP address to connect from; `None` lets
                the operating system choose
        """
        self.address = (host, port)
        self.local_address = local_address
        self.address_space = (
            address_space if address_space is not None else AddressSpace()
        )
        self._stream: Optional[SocketStream] = None
        self._lock = Lock()

    @property
    def is_connected(self) -> bool:
        """Returns whether the client is connected to the remote host."""
        return self._stream is not None

    def handle(self, pattern: OSCAddress, handler: MessageHandler) -> OSCMethod:
        """Registers a handler function for responses whose address matches
        the given pattern.
        """
        return self.address_space.handle(pattern, handler)

    async def connect(self) -> None:
        """Connects the client to the remote host. No-op if the client is
        connected already.
        """
        if self._stream is None:
            host, port = self.address
            self._stream = await open_tcp_stream(
                host, port, local_address=self.local_address
            )

    async def disconnect(self) -> None:
        """Closes the connection to the remote host. No-op if the client is
        not connected.
        """
        if self._stream is not None:
            stream, self._stream = self._stream, None
            await stream.aclose()

    async def run_response_reader(self) -> None:
        """Reads the packets sent back by the remote host and dispatches the
        messages among them to the address space of the client, until the
        connection is closed. The client is disconnected when the reader
        returns.

        Exceptions raised by the handlers are logged and do not stop the
        reader.

        Raises:
            NotConnectedError: if the client is not connected
        """
        stream = self._stream
        if stream is None:
            raise NotConnectedError()

        channel = ParserChannel(
            stream.receive_some, LengthPrefixedParser(), self.disconnect
        )
        async with channel:
            try:
                async for data in channel:
                    await self._handle_data_safely(data)
            except (BrokenResourceError, ClosedResourceError):
                pass
            except InvalidFramingError as ex:
                log.warning(
                    f"Malformed stream from "
                    f"{format_socket_address(self.address)}: {ex}"
                )

    async def _handle_data_safely(self, data: bytes) -> None:
        """Dispatches a single response in a worker thread, ensuring that
        exceptions raised by the handlers do not stop the response reader.
        """
        try:
            await to_thread.run_sync(
                handle_incoming_data, self.address_space, data, self.address
            )
        except Exception as ex:
            log.exception(ex)

    async def send(self, packet: OSCPacket) -> None:
        """Sends an OSC message or bundle to the remote host, preceded by its
        length.

        Raises:
            NotConnectedError: if the client is not connected
            UnsupportedTypeError: if the packet cannot be encoded
        """
        if self._stream is None:
            raise NotConnectedError()

        data = frame_packet(packet)
        async with self._lock:
            # Locking is needed, otherwise two tasks sending at the same time
            # could interleave partially sent packets on the stream
            await self._stream.send_all(data)
