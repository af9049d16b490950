"""Shared test fixtures."""

from __future__ import annotations

import socket
import socketserver
import struct
import threading
from typing import Iterator

import pytest

EICAR = b"X5O!P%@AP[4\\PZX54(P^)7CC)7}$EICAR-STANDARD-ANTIVIRUS-TEST-FILE!$H+H*"


@pytest.fixture()
def sample_bytes() -> bytes:
    return b"Hello, ClamAV!"


@pytest.fixture()
def eicar_bytes() -> bytes:
    """EICAR anti-malware test string (safe; every AV recognises it)."""
    return EICAR


# ------------------------------------------------------------------ #
# Scripted in-memory session
# ------------------------------------------------------------------ #


class FakeSession:
    """Records what the client sends and replays a canned reply.

    Args:
        reply: Bytes returned by :meth:`read_all`.
        abort_after: Report pending input once this many chunk frames
            have been sent; ``None`` never does.
    """

    def __init__(self, reply: bytes = b"", abort_after: int | None = None) -> None:
        self.reply = reply
        self.abort_after = abort_after
        self.sent: list[bytes] = []
        self.probes = 0
        self.closed = False

    def send(self, data: bytes) -> None:
        self.sent.append(data)

    def has_pending_input(self) -> bool:
        self.probes += 1
        return self.abort_after is not None and self.probes >= self.abort_after

    def read_all(self, buffer_size: int) -> bytes:
        return self.reply

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> FakeSession:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def data(self) -> bytes:
        return b"".join(self.sent)


def parse_frames(payload: bytes) -> list[bytes]:
    """Split an ``INSTREAM`` body into chunk payloads, terminator included as ``b""``."""
    frames = []
    offset = 0
    while offset < len(payload):
        (length,) = struct.unpack_from(">I", payload, offset)
        offset += 4
        frames.append(payload[offset : offset + length])
        offset += length
    return frames


# ------------------------------------------------------------------ #
# In-process clamd over real TCP
# ------------------------------------------------------------------ #


class FakeClamdHandler(socketserver.StreamRequestHandler):
    """Speaks enough of the clamd protocol for PING and INSTREAM."""

    server: FakeClamdServer

    def handle(self) -> None:
        command = self._read_command()
        self.server.commands.append(command)
        if command == b"zPING\0":
            self.wfile.write(b"PONG\0")
        elif command == b"zINSTREAM\0":
            self._instream()
        else:
            self.wfile.write(b"UNKNOWN COMMAND\0")

    def _read_command(self) -> bytes:
        command = bytearray()
        while not command.endswith(b"\0"):
            byte = self.rfile.read(1)
            if not byte:
                break
            command += byte
        return bytes(command)

    def _instream(self) -> None:
        received = bytearray()
        while True:
            header = self.rfile.read(4)
            if len(header) < 4:
                return
            (length,) = struct.unpack(">I", header)
            self.server.frames.append(length)
            if length == 0:
                break
            received += self.rfile.read(length)
            if len(received) > self.server.max_stream_size:
                self.wfile.write(b"INSTREAM size limit exceeded. ERROR\0")
                self.wfile.flush()
                self.request.shutdown(socket.SHUT_WR)
                while self.rfile.read(4096):
                    pass
                return

        if EICAR in received:
            self.wfile.write(b"stream: Eicar-Test-Signature FOUND\0")
        else:
            self.wfile.write(b"stream: OK\0")


class FakeClamdServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, max_stream_size: int = 1024 * 1024) -> None:
        super().__init__(("127.0.0.1", 0), FakeClamdHandler)
        self.max_stream_size = max_stream_size
        self.frames: list[int] = []
        self.commands: list[bytes] = []

    @property
    def port(self) -> int:
        return self.server_address[1]


@pytest.fixture()
def fake_clamd() -> Iterator[FakeClamdServer]:
    server = FakeClamdServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture()
def silent_port() -> Iterator[int]:
    """A port that accepts connections but never answers."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    try:
        yield listener.getsockname()[1]
    finally:
        listener.close()


@pytest.fixture()
def closed_port() -> int:
    """A port nothing is listening on."""
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return port
