"""Connection settings for the clamd client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from clamd_sdk.protocol import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_PORT,
    DEFAULT_READ_BUFFER_SIZE,
    DEFAULT_TIMEOUT,
    MAX_CHUNK_SIZE,
)


@dataclass(frozen=True, slots=True)
class ClamdConfig:
    """Settings shared by every session a :class:`~clamd_sdk.ClamdClient` opens.

    Attributes:
        host: Host name or address of the clamd server.
        port: TCP port clamd listens on.
        timeout: Seconds any single blocking socket call may wait.
        chunk_size: Bytes sent per ``INSTREAM`` chunk. Must not exceed
            ``StreamMaxChunkSize`` configured in clamd.
        read_buffer_size: Bytes requested per ``recv`` when reading replies.
    """

    host: str
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("host must not be empty")
        if not 0 < self.port < 65536:
            raise ValueError(f"port out of range: {self.port}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive: {self.timeout}")
        if not 0 < self.chunk_size <= MAX_CHUNK_SIZE:
            raise ValueError(f"chunk_size must be between 1 and {MAX_CHUNK_SIZE}: {self.chunk_size}")
        if self.read_buffer_size <= 0:
            raise ValueError(f"read_buffer_size must be positive: {self.read_buffer_size}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClamdConfig:
        """Build a config from ``CLAMD_*`` environment variables.

        ``CLAMD_HOST`` is required. ``CLAMD_PORT``, ``CLAMD_TIMEOUT``,
        ``CLAMD_CHUNK_SIZE`` and ``CLAMD_READ_BUFFER_SIZE`` fall back to the
        defaults when unset.

        Raises:
            ValueError: If ``CLAMD_HOST`` is missing or a value is malformed.
        """
        env = os.environ if environ is None else environ
        host = env.get("CLAMD_HOST", "")
        if not host:
            raise ValueError("CLAMD_HOST is not set")
        return cls(
            host=host,
            port=int(env.get("CLAMD_PORT", DEFAULT_PORT)),
            timeout=float(env.get("CLAMD_TIMEOUT", DEFAULT_TIMEOUT)),
            chunk_size=int(env.get("CLAMD_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)),
            read_buffer_size=int(env.get("CLAMD_READ_BUFFER_SIZE", DEFAULT_READ_BUFFER_SIZE)),
        )
