"""Default configuration of the Flockwave OSC library.

The transports and the command line launcher read their defaults from this
module. The launcher also honours the ``OSC_HOST`` and ``OSC_PORT``
environment variables (optionally loaded from a ``.env`` file), and its
command line options take precedence over both.
"""

# IP address or hostname that servers bind to; an empty string means all
# interfaces
HOST = ""

# Port number that servers listen on and clients send to by default
PORT = 10000

# Maximum number of incoming packets that a server processes concurrently
POOL_SIZE = 1000

# Size of the buffer used to receive a single UDP datagram
UDP_READ_BUFFER_SIZE = 65536

# Maximum nesting depth of bundles accepted by the decoder
MAX_BUNDLE_DEPTH = 16

# Largest packet length accepted in the length prefix of a TCP stream
MAX_STREAM_PACKET_SIZE = 16 * 1024 * 1024
