"""Wire constants and framing helpers for the clamd socket protocol.

For details about commands, see man clamd(8).
"""

from __future__ import annotations

import struct

DEFAULT_PORT = 3310
DEFAULT_TIMEOUT = 1.0
DEFAULT_CHUNK_SIZE = 4096
DEFAULT_READ_BUFFER_SIZE = 128

# Largest payload a 4-byte unsigned length prefix can describe.
MAX_CHUNK_SIZE = 0xFFFFFFFF

_FRAME_HEADER = struct.Struct(">I")


def encode(command: str, outgoing: bool) -> bytes:
    """Encode a command name into its null-terminated ASCII wire form.

    Outgoing commands carry the ``z`` prefix, which tells clamd that the
    command and its reply are delimited by ``\\0``.

    Args:
        command: Bare command name without any framing (e.g. ``"PING"``).
        outgoing: ``True`` for a request sent to clamd, ``False`` for an
            expected reply.
    """
    text = f"z{command}\0" if outgoing else f"{command}\0"
    return text.encode("ascii")


def encode_frame(payload: bytes) -> bytes:
    """Prefix *payload* with its 4-byte big-endian length."""
    return _FRAME_HEADER.pack(len(payload)) + payload


CMD_PING = encode("PING", True)
RSP_PONG = encode("PONG", False)
CMD_INSTREAM = encode("INSTREAM", True)
RSP_UNKNOWN_COMMAND = encode("UNKNOWN COMMAND", False)
CMD_TERMINATE = b"\x00\x00\x00\x00"

RESPONSE_OK = "stream: OK"
FOUND_PREFIX = "stream: "
FOUND_SUFFIX = " FOUND"
RESPONSE_TOO_BIG = "INSTREAM size limit exceeded. ERROR"
