"""Exception hierarchy for the clamd SDK."""

from __future__ import annotations

from clamd_sdk.models import ScanResult


class ClamdError(Exception):
    """Base exception for all clamd SDK errors."""


class ClamdConnectionError(ClamdError):
    """Raised when a session with clamd cannot be opened or maintained.

    Covers unreachable hosts, resets and any other I/O failure during an
    operation, including failures reading the data being scanned.
    """


class ClamdTimeoutError(ClamdConnectionError):
    """Raised when a blocking socket call exceeds the configured timeout."""


class ClamdScanAbortedError(ClamdError):
    """Raised when clamd answers an upload before the terminator was sent.

    clamd does this when it rejects a stream mid-transfer, most commonly
    because ``StreamMaxLength`` was exceeded.

    Attributes:
        raw: Bytes drained from the session after the abort was detected.
        response: *raw* decoded as ASCII, without the trailing terminator.
    """

    def __init__(self, raw: bytes) -> None:
        self.raw = raw
        self._result = ScanResult.from_bytes(raw)
        self.response = self._result.response
        super().__init__(f"Scan aborted prematurely. Server says {self.response}")

    def __reduce__(self) -> tuple[type[ClamdScanAbortedError], tuple[bytes]]:
        return (type(self), (self.raw,))

    @property
    def result(self) -> ScanResult:
        """The daemon's abort message, classified like a normal response."""
        return self._result
