"""Synchronous TCP client for the clamd daemon."""

from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from clamd_sdk.config import ClamdConfig
from clamd_sdk.connection import ClamdSession, SessionFactory
from clamd_sdk.exceptions import ClamdConnectionError, ClamdScanAbortedError, ClamdTimeoutError
from clamd_sdk.models import ScanResult
from clamd_sdk.protocol import (
    CMD_INSTREAM,
    CMD_PING,
    CMD_TERMINATE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_PORT,
    DEFAULT_READ_BUFFER_SIZE,
    DEFAULT_TIMEOUT,
    RSP_PONG,
    encode_frame,
)

logger = logging.getLogger(__name__)

ScanInput = Union[bytes, bytearray, memoryview, BinaryIO]


class ClamdClient:
    """Synchronous client for a clamd daemon listening on TCP.

    Every call opens its own connection and closes it before returning, so a
    single client may be shared freely between threads.

    Args:
        host: Host name or address of the clamd server.
        port: TCP port clamd listens on.
        timeout: Seconds any single blocking socket call may wait.
        chunk_size: Bytes sent per ``INSTREAM`` chunk. Must not exceed the
            ``StreamMaxChunkSize`` configured in clamd.
        read_buffer_size: Bytes requested per ``recv`` when reading replies.
            Replies are short, so the default rarely needs changing.
        session_factory: Optional callable ``(host, port, timeout)`` returning
            a :class:`ClamdSession`-compatible object, for custom transports.

    Example::

        client = ClamdClient("localhost")
        result = client.scan_file("/tmp/sample.txt")
        print(result.status, result.virus)
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self._config = ClamdConfig(
            host=host,
            port=port,
            timeout=timeout,
            chunk_size=chunk_size,
            read_buffer_size=read_buffer_size,
        )
        self._session_factory = session_factory or ClamdSession.open

    @classmethod
    def from_config(cls, config: ClamdConfig, session_factory: SessionFactory | None = None) -> ClamdClient:
        """Create a client from a :class:`ClamdConfig`.

        Args:
            config: Connection settings to use for every session.
            session_factory: Optional custom transport, as for the constructor.

        Returns:
            A new :class:`ClamdClient`.
        """
        return cls(
            host=config.host,
            port=config.port,
            timeout=config.timeout,
            chunk_size=config.chunk_size,
            read_buffer_size=config.read_buffer_size,
            session_factory=session_factory,
        )

    @classmethod
    def from_env(cls) -> ClamdClient:
        """Create a client from ``CLAMD_*`` environment variables.

        See :meth:`ClamdConfig.from_env` for the variables read.
        """
        return cls.from_config(ClamdConfig.from_env())

    @property
    def config(self) -> ClamdConfig:
        """The validated settings this client connects with."""
        return self._config

    def ping(self) -> bool:
        """Send ``PING`` and check for a ``PONG`` reply.

        Returns:
            ``True`` if clamd answered with ``PONG``.

        Raises:
            ClamdConnectionError: If clamd is unreachable.
            ClamdTimeoutError: If clamd does not answer in time.
        """
        return self.command_matches(CMD_PING, RSP_PONG)

    def send_command(self, command: bytes) -> bytes:
        """Send an encoded command and return everything clamd replies.

        Args:
            command: Wire form of the command, see :func:`clamd_sdk.protocol.encode`.

        Returns:
            The raw reply, including its terminator.

        Raises:
            ClamdConnectionError: If the session fails at any point.
            ClamdTimeoutError: If clamd does not answer in time.
        """
        with self._session() as session:
            session.send(command)
            return session.read_all(self._config.read_buffer_size)

    def command_matches(self, command: bytes, expected: bytes) -> bool:
        """Send *command* and compare the raw reply byte for byte with *expected*."""
        return self.send_command(command) == expected

    def scan(self, data: ScanInput) -> ScanResult:
        """Scan bytes or a binary stream using ``INSTREAM``.

        Args:
            data: Raw bytes (``bytes``, ``bytearray`` or ``memoryview``) or a
                readable blocking binary stream. Streams are read from their
                current position until exhausted.

        Returns:
            A :class:`ScanResult` with the classified reply.

        Raises:
            ClamdScanAbortedError: If clamd rejected the stream mid-upload.
            ClamdConnectionError: If the session fails at any point.
            ClamdTimeoutError: If clamd does not answer in time.
        """
        return ScanResult.from_bytes(self.scan_raw(data))

    def scan_raw(self, data: ScanInput) -> bytes:
        """Like :meth:`scan` but return clamd's unparsed reply."""
        stream: BinaryIO = io.BytesIO(data) if isinstance(data, (bytes, bytearray, memoryview)) else data
        with self._session() as session:
            return self._upload(session, stream)

    def scan_file(self, file_path: Union[str, Path]) -> ScanResult:
        """Scan a file on disk by streaming its contents.

        Raises:
            FileNotFoundError: If *file_path* does not exist.
            ClamdScanAbortedError: If clamd rejected the stream mid-upload.
            ClamdConnectionError: If the session fails at any point.
        """
        return ScanResult.from_bytes(self.scan_file_raw(file_path))

    def scan_file_raw(self, file_path: Union[str, Path]) -> bytes:
        """Like :meth:`scan_file` but return clamd's unparsed reply."""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        with open(path, "rb") as fh:
            return self.scan_raw(fh)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _session(self) -> Iterator[ClamdSession]:
        cfg = self._config
        try:
            with self._session_factory(cfg.host, cfg.port, cfg.timeout) as session:
                yield session
        except TimeoutError as exc:
            raise ClamdTimeoutError(f"clamd at {cfg.host}:{cfg.port} timed out: {exc}") from exc
        except OSError as exc:
            raise ClamdConnectionError(f"clamd at {cfg.host}:{cfg.port}: {exc}") from exc

    def _upload(self, session: ClamdSession, stream: BinaryIO) -> bytes:
        session.send(CMD_INSTREAM)

        frames = 0
        sent = 0
        while True:
            chunk = stream.read(self._config.chunk_size)
            if chunk is None:
                raise ClamdConnectionError("scan source returned no data; non-blocking streams are not supported")
            if chunk == b"":
                break
            session.send(encode_frame(chunk))
            frames += 1
            sent += len(chunk)

            # Any reply before the terminator means clamd gave up on the stream.
            if session.has_pending_input():
                raw = session.read_all(self._config.read_buffer_size)
                logger.warning("clamd aborted the scan after %d bytes in %d chunks", sent, frames)
                raise ClamdScanAbortedError(raw)

        session.send(CMD_TERMINATE)
        logger.debug("Streamed %d bytes in %d chunks", sent, frames)
        return session.read_all(self._config.read_buffer_size)
