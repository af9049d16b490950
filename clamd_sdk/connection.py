"""TCP session with a clamd daemon.

A session carries exactly one command exchange or one stream scan. clamd
closes its side once it has replied, so every operation opens a new one.
"""

from __future__ import annotations

import logging
import select
import socket
from typing import Callable

logger = logging.getLogger(__name__)


class ClamdSession:
    """A connected duplex byte stream to clamd.

    Low-level :class:`OSError` subclasses (including :class:`TimeoutError`)
    propagate unchanged; :class:`~clamd_sdk.ClamdClient` translates them.
    """

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    @classmethod
    def open(cls, host: str, port: int, timeout: float) -> ClamdSession:
        """Connect to ``host:port``; *timeout* bounds every later socket call."""
        logger.debug("Connecting to clamd at %s:%d", host, port)
        return cls(socket.create_connection((host, port), timeout=timeout))

    def send(self, data: bytes) -> None:
        self._sock.sendall(data)

    def has_pending_input(self) -> bool:
        """Return ``True`` if clamd has sent bytes that were not asked for yet.

        Never blocks. A closed peer with nothing left to read counts as no
        pending input.
        """
        readable, _, _ = select.select([self._sock], [], [], 0)
        if not readable:
            return False
        return bool(self._sock.recv(1, socket.MSG_PEEK))

    def read_all(self, buffer_size: int) -> bytes:
        """Read until clamd closes the connection."""
        buffer = bytearray()
        while True:
            piece = self._sock.recv(buffer_size)
            if not piece:
                return bytes(buffer)
            buffer += piece

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> ClamdSession:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


#: Opens a session given ``(host, port, timeout)``.
SessionFactory = Callable[[str, int, float], ClamdSession]
