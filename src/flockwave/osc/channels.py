"""Trio-style channel that reads raw bytes from an async reader function and
yields the OSC packets framed in them.
"""

from collections import deque
from inspect import iscoroutinefunction
from trio import EndOfChannel
from trio.abc import ReceiveChannel
from typing import Awaitable, Callable, Deque, List, Optional, Union

from .parsers import LengthPrefixedParser

__all__ = ("ParserChannel",)

Reader = Callable[[], Awaitable[bytes]]
ParserFunction = Callable[[bytes], List[bytes]]


class ParserChannel(ReceiveChannel[bytes]):
    """Trio-style ReceiveChannel_ that reads raw bytes with an async reader
    function and yields the raw packets parsed out of them.

    Closing the channel calls the closer function given at construction time,
    which typically closes the underlying stream.
    """

    def __init__(
        self,
        reader: Reader,
        parser: Union[LengthPrefixedParser, ParserFunction],
        closer: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        if not iscoroutinefunction(reader):
            raise TypeError(f"async function expected, got {type(reader)}")

        if callable(getattr(parser, "feed", None)):
            self._parser = parser.feed
        elif callable(parser):
            self._parser = parser
        else:
            raise TypeError(f"Parser or callable expected, got {type(parser)}")

        self._reader = reader
        self._closer = closer
        self._pending: Deque[bytes] = deque()

    async def aclose(self) -> None:
        if self._closer:
            await self._closer()

    async def receive(self) -> bytes:
        while not self._pending:
            await self._read()
        return self._pending.popleft()

    async def _read(self) -> None:
        """Reads the pending bytes using the associated reader function and
        feeds the parsed packets into the pending list.

        Raises:
            EndOfChannel: if there is no more data to read
        """
        data = await self._reader()
        if not data:
            raise EndOfChannel()
        self._pending.extend(self._parser(data))
