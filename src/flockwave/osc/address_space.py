"""Registry of OSC methods that maps address patterns to handler functions
and dispatches incoming messages to every matching handler.
"""

from __future__ import annotations

import re

from blinker import Signal
from dataclasses import dataclass
from threading import Lock
from typing import Iterator, List, Optional, Pattern, Sequence, Tuple

from .errors import InvalidPatternError
from .logger import log as base_log
from .message import OSCMessage
from .types import MessageHandler, OSCAddress

__all__ = (
    "AddressSpace",
    "OSCMethod",
    "compile_address_pattern",
    "translate_address_pattern",
)

log = base_log.getChild("address_space")


def translate_address_pattern(pattern: OSCAddress) -> str:
    """Translates an OSC address pattern into a regular expression.

    Slashes are literal path separators, ``?`` matches a single character,
    ``*`` matches any number of characters, ``[...]`` is a character class
    that is negated by ``!`` either right before or right after the opening
    bracket, and ``{a,b,c}`` is an alternation group. All other characters
    match themselves.

    Raises:
        InvalidPatternError: if the brackets or braces of the pattern are not
            balanced
    """
    parts: List[str] = []
    depth = 0
    index, length = 0, len(pattern)

    while index < length:
        char = pattern[index]
        if char == "/":
            parts.append(r"\/")
        elif char == "?":
            parts.append(".")
        elif char == "*":
            parts.append(".*")
        elif char == "!" and pattern.startswith("[", index + 1):
            index = _translate_character_class(pattern, index + 1, parts, True)
            continue
        elif char == "[":
            index = _translate_character_class(pattern, index, parts, False)
            continue
        elif char == "{":
            depth += 1
            parts.append("(")
        elif char == "}":
            if not depth:
                raise InvalidPatternError(f"Unbalanced '}}' in pattern {pattern!r}")
            depth -= 1
            parts.append(")")
        elif char == "," and depth:
            parts.append("|")
        else:
            parts.append(re.escape(char))
        index += 1

    if depth:
        raise InvalidPatternError(f"Unbalanced '{{' in pattern {pattern!r}")

    return "".join(parts)


def _translate_character_class(
    pattern: str, start: int, parts: List[str], negated: bool
) -> int:
    """Translates the character class starting at the given index of the
    pattern, appends it to the given list and returns the index of the first
    character after the class.
    """
    end = pattern.find("]", start + 1)
    if end < 0:
        raise InvalidPatternError(f"Unterminated '[' in pattern {pattern!r}")

    body = pattern[start + 1 : end]
    if body.startswith("!"):
        negated = True
        body = body[1:]
    if not body:
        raise InvalidPatternError(f"Empty character class in pattern {pattern!r}")

    body = "".join(char if char == "-" else re.escape(char) for char in body)
    parts.append(f"[{'^' if negated else ''}{body}]")
    return end + 1


def compile_address_pattern(pattern: OSCAddress) -> Pattern[str]:
    """Compiles an OSC address pattern into a regular expression object that
    matches entire addresses.

    Raises:
        InvalidPatternError: if the pattern cannot be compiled
    """
    try:
        return re.compile(translate_address_pattern(pattern))
    except re.error as ex:
        raise InvalidPatternError(
            f"Invalid OSC address pattern {pattern!r}: {ex}"
        ) from ex


@dataclass(frozen=True)
class OSCMethod:
    """An address pattern registered in an address space, together with its
    compiled matcher and its handler function.
    """

    pattern: OSCAddress
    """The address pattern that the method was registered with."""

    matcher: Pattern[str]
    """The compiled regular expression of the address pattern."""

    handler: MessageHandler
    """The function to call with each matching message."""

    def matches(self, address: OSCAddress) -> bool:
        """Returns whether the given address matches the pattern of the
        method.
        """
        return self.matcher.fullmatch(address) is not None


class AddressSpace:
    """Registry of OSC methods that an OSC server or client responds to.

    Registration is append-only and the registration order is preserved; it is
    also the order in which the handlers are invoked by `dispatch()`.

    Methods may be registered while other threads are dispatching messages.
    Each dispatch works on the snapshot of the registry that was current when
    the dispatch started.

    Attributes:
        added (Signal): signal that is sent by the address space when a new
            method has been registered. The signal has a keyword argument
            named ``method`` that contains the method that was registered.
    """

    added = Signal(
        doc="""\
        Signal sent whenever a new method is registered in the address space.

        Parameters:
            method (OSCMethod): the method that was registered
        """
    )

    _lock: Lock
    _methods: Tuple[OSCMethod, ...]

    def __init__(self):
        """Constructor."""
        self._lock = Lock()
        self._methods = ()

    @property
    def methods(self) -> Sequence[OSCMethod]:
        """Returns the methods registered in the address space, in
        registration order.
        """
        return self._methods

    def dispatch(self, message: Optional[OSCMessage]) -> int:
        """Invokes the handler of every registered method whose pattern
        matches the address of the given message, in registration order.

        Exceptions raised by the handlers are not caught.

        Parameters:
            message: the message to dispatch; `None` is ignored

        Returns:
            the number of handlers that were invoked
        """
        if message is None:
            return 0

        count = 0
        for method in self.methods_matching(message.address):
            method.handler(message)
            count += 1

        if not count:
            log.debug(f"No handler for OSC address {message.address}")

        return count

    def handle(self, pattern: OSCAddress, handler: MessageHandler) -> OSCMethod:
        """Registers a handler function for the given address pattern.

        Parameters:
            pattern: the OSC address pattern to match messages against
            handler: the function to call with each matching message

        Returns:
            the registered method

        Raises:
            InvalidPatternError: if the address pattern cannot be compiled
        """
        method = OSCMethod(pattern, compile_address_pattern(pattern), handler)
        with self._lock:
            self._methods = self._methods + (method,)
        self.added.send(self, method=method)
        return method

    def methods_matching(self, address: OSCAddress) -> Iterator[OSCMethod]:
        """Returns an iterator over the registered methods whose pattern
        matches the given address, in registration order.
        """
        return (method for method in self._methods if method.matches(address))

    def __len__(self) -> int:
        return len(self._methods)
