from concurrent.futures import ThreadPoolExecutor
from pytest import fixture, mark, raises

from flockwave.osc.address_space import (
    AddressSpace,
    compile_address_pattern,
    translate_address_pattern,
)
from flockwave.osc.errors import InvalidPatternError
from flockwave.osc.message import OSCMessage


@fixture
def space() -> AddressSpace:
    return AddressSpace()


def matches(pattern: str, address: str) -> bool:
    return compile_address_pattern(pattern).fullmatch(address) is not None


@mark.parametrize(
    "pattern,address,expected",
    [
        ("/foo/bar", "/foo/bar", True),
        ("/foo/bar", "/foo/baz", False),
        ("/foo/bar", "/foo/bar/baz", False),
        ("/foo/?", "/foo/1", True),
        ("/foo/?", "/foo/12", False),
        ("/foo/?", "/foo/", False),
        ("/foo/*", "/foo/anything", True),
        ("/foo/*", "/foo/", True),
        ("/foo/*/bar", "/foo/x/bar", True),
        ("/a/{x,y,z}", "/a/x", True),
        ("/a/{x,y,z}", "/a/y", True),
        ("/a/{x,y,z}", "/a/q", False),
        ("/a/{left,right}/gain", "/a/right/gain", True),
        ("/a,b", "/a,b", True),
        ("/ch/[0-9]", "/ch/7", True),
        ("/ch/[0-9]", "/ch/a", False),
        ("/ch/[abc]", "/ch/b", True),
        ("/ch/[!abc]", "/ch/b", False),
        ("/ch/[!abc]", "/ch/d", True),
        ("/ch/![abc]", "/ch/b", False),
        ("/ch/![abc]", "/ch/d", True),
        ("/ch/[a-c]x", "/ch/bx", True),
        ("/ch/[-a]", "/ch/-", True),
        ("/dots.are.literal", "/dotsXareXliteral", False),
        ("/dots.are.literal", "/dots.are.literal", True),
        ("/a+b", "/a+b", True),
        ("/a+b", "/aab", False),
    ],
)
def test_pattern_matching(pattern: str, address: str, expected: bool):
    assert matches(pattern, address) is expected


def test_translate_address_pattern():
    assert translate_address_pattern("/foo/?") == r"\/foo\/."
    assert translate_address_pattern("/foo/*") == r"\/foo\/.*"
    assert translate_address_pattern("/{a,b}") == r"\/(a|b)"
    assert translate_address_pattern("/[!0-9]") == r"\/[^0-9]"


@mark.parametrize("pattern", ["/foo/[", "/foo/{a", "/foo/}", "/foo/[]", "/[!]"])
def test_invalid_patterns(pattern: str, space: AddressSpace):
    with raises(InvalidPatternError):
        compile_address_pattern(pattern)
    with raises(InvalidPatternError):
        space.handle(pattern, print)
    assert len(space) == 0


def test_invalid_range():
    with raises(InvalidPatternError):
        compile_address_pattern("/ch/[z-a]")


def test_dispatch_to_matching_handlers_in_order(space: AddressSpace):
    calls = []
    space.handle("/foo/*", lambda message: calls.append(("star", message.address)))
    space.handle("/bar", lambda message: calls.append(("bar", message.address)))
    space.handle("/foo/?", lambda message: calls.append(("one", message.address)))

    assert space.dispatch(OSCMessage("/foo/1")) == 2
    assert calls == [("star", "/foo/1"), ("one", "/foo/1")]

    calls.clear()
    assert space.dispatch(OSCMessage("/foo/12")) == 1
    assert calls == [("star", "/foo/12")]

    calls.clear()
    assert space.dispatch(OSCMessage("/nothing")) == 0
    assert calls == []


def test_dispatch_passes_message(space: AddressSpace):
    received = []
    space.handle("/osc/freq", received.append)

    message = OSCMessage("/osc/freq", [440.0])
    space.dispatch(message)

    assert received == [message]
    assert received[0].values == [440.0]


def test_dispatch_none(space: AddressSpace):
    space.handle("*", lambda message: 1 / 0)
    assert space.dispatch(None) == 0


def test_handler_exceptions_propagate(space: AddressSpace):
    calls = []

    def fail(message):
        raise RuntimeError("handler failed")

    space.handle("/a", fail)
    space.handle("/a", calls.append)

    with raises(RuntimeError, match="handler failed"):
        space.dispatch(OSCMessage("/a"))

    assert calls == []


def test_same_pattern_registered_twice(space: AddressSpace):
    calls = []
    space.handle("/a", calls.append)
    space.handle("/a", calls.append)
    assert space.dispatch(OSCMessage("/a")) == 2
    assert len(calls) == 2


def test_methods(space: AddressSpace):
    first = space.handle("/a", print)
    second = space.handle("/b/*", print)

    assert list(space.methods) == [first, second]
    assert len(space) == 2
    assert first.pattern == "/a"
    assert first.handler is print
    assert second.matches("/b/c")
    assert not second.matches("/a")
    assert list(space.methods_matching("/b/x")) == [second]


def test_added_signal(space: AddressSpace):
    events = []
    other = AddressSpace()

    def on_added(sender, method):
        events.append((sender, method))

    AddressSpace.added.connect(on_added, sender=space)
    try:
        method = space.handle("/foo", print)
        other.handle("/bar", print)
    finally:
        AddressSpace.added.disconnect(on_added, sender=space)

    assert events == [(space, method)]


def test_registration_during_dispatch(space: AddressSpace):
    calls = []

    def register_more(message):
        calls.append("first")
        space.handle("/a", lambda message: calls.append("late"))

    space.handle("/a", register_more)

    # Methods registered while a dispatch is running are not seen by it
    assert space.dispatch(OSCMessage("/a")) == 1
    assert calls == ["first"]

    calls.clear()
    assert space.dispatch(OSCMessage("/a")) == 2
    assert calls == ["first", "late"]


def test_concurrent_registration(space: AddressSpace):
    def register(index: int):
        space.handle(f"/thread/{index}", print)

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(register, range(200)))

    assert len(space) == 200
    assert sorted(method.pattern for method in space.methods) == sorted(
        f"/thread/{index}" for index in range(200)
    )
