"""Command line launcher for the OSC tools."""

import click
import dotenv
import logging
import sys
import trio

from functools import partial
from typing import Any, Sequence, Union

from . import config
from .client import OSCTCPClient, OSCUDPClient
from .errors import OSCError
from .logger import install as install_logger, log as base_log
from .message import OSCMessage
from .server import OSCTCPServer, OSCUDPServer
from .version import __version__

log = base_log.getChild("launcher")

_keywords = {"true": True, "false": False, "nil": None}


def parse_argument_value(text: str) -> Any:
    """Parses an argument of an OSC message given on the command line.

    The keywords ``true``, ``false`` and ``nil`` are mapped to booleans and
    ``None``; anything else is parsed as an integer, then as a float, and is
    kept as a string if both attempts fail.
    """
    if text in _keywords:
        return _keywords[text]

    for converter in (int, float):
        try:
            return converter(text)
        except ValueError:
            pass

    return text


@click.group()
@click.option(
    "-d", "--debug/--no-debug", default=False, help="Print debug messages as well"
)
@click.option(
    "-q", "--quiet/--no-quiet", default=False, help="Print warnings and errors only"
)
@click.option(
    "--log-style",
    type=click.Choice(["fancy", "plain"]),
    default="fancy",
    help="Specify the style of the logging output",
)
@click.version_option(version=__version__)
def cli(debug: bool = False, quiet: bool = False, log_style: str = "fancy"):
    """Send and receive Open Sound Control messages."""
    install_logger(
        level=logging.DEBUG if debug else logging.WARN if quiet else logging.INFO,
        style=log_style,
    )

    # Load environment variables from .env so they can provide defaults for
    # the options of the subcommands
    dotenv.load_dotenv(verbose=debug)


def transport_options(func):
    """Decorator that adds the host, port and transport options shared by
    the subcommands.
    """
    func = click.option(
        "--tcp/--udp",
        "use_tcp",
        default=False,
        help="Use TCP with length-prefixed packets instead of UDP",
    )(func)
    func = click.option(
        "-p",
        "--port",
        type=int,
        envvar="OSC_PORT",
        default=config.PORT,
        show_default=True,
        help="Port number; the OSC_PORT environment variable is used if omitted",
    )(func)
    func = click.option(
        "-h",
        "--host",
        envvar="OSC_HOST",
        default=None,
        help="IP address or hostname; the OSC_HOST environment variable is used "
        "if omitted",
    )(func)
    return func


@cli.command()
@transport_options
@click.option(
    "--pattern",
    default="*",
    show_default=True,
    help="Print only the messages whose address matches this OSC address pattern",
)
def listen(host: str, port: int, use_tcp: bool, pattern: str):
    """Print the OSC messages received on a port."""
    server_factory = OSCTCPServer if use_tcp else OSCUDPServer
    server = server_factory(config.HOST if host is None else host, port)

    try:
        server.handle(pattern, lambda message: click.echo(str(message)))
    except OSCError as ex:
        raise click.BadParameter(str(ex), param_hint="--pattern") from ex

    try:
        trio.run(server.serve)
    except KeyboardInterrupt:
        pass

    log.info("Shutdown finished")


@cli.command()
@transport_options
@click.argument("address")
@click.argument("values", nargs=-1)
def send(host: str, port: int, use_tcp: bool, address: str, values: Sequence[str]):
    """Send an OSC message with the given address and argument values."""
    try:
        message = OSCMessage(address, [parse_argument_value(v) for v in values])
    except OSCError as ex:
        raise click.BadParameter(str(ex), param_hint="VALUES") from ex

    client_factory = OSCTCPClient if use_tcp else OSCUDPClient
    client = client_factory(host or "127.0.0.1", port)
    trio.run(partial(send_message, client, message))

    log.info(f"Sent {message} to {host or '127.0.0.1'}:{port}")


async def send_message(
    client: Union[OSCTCPClient, OSCUDPClient], message: OSCMessage
) -> None:
    """Connects the given client, sends a single message and disconnects."""
    await client.connect()
    try:
        await client.send(message)
    finally:
        await client.disconnect()


def start() -> None:
    """Entry point of the ``flockwave-osc`` command."""
    sys.exit(cli(prog_name="flockwave-osc"))


if __name__ == "__main__":
    start()
