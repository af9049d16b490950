"""Data models for clamd scan responses."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from clamd_sdk.protocol import FOUND_PREFIX, FOUND_SUFFIX, RESPONSE_OK, RESPONSE_TOO_BIG


class ScanStatus(enum.Enum):
    """Classification of a clamd stream scan response."""

    #: No signature matched. The data is not necessarily clean.
    OK = "OK"
    #: One or more signatures matched.
    FOUND = "FOUND"
    #: clamd rejected the stream because it exceeded ``StreamMaxLength``.
    ERROR_TOO_BIG = "ERROR_TOO_BIG"
    #: The response could not be understood.
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Result of a stream scan operation.

    Attributes:
        response: Response text as sent by clamd, without the terminator.
        status: Classified outcome of the scan.
        virus: Signature name reported by clamd. Set if and only if
            *status* is :attr:`ScanStatus.FOUND`.
    """

    response: str
    status: ScanStatus
    virus: str | None = None

    def __post_init__(self) -> None:
        if (self.status is ScanStatus.FOUND) != (self.virus is not None):
            raise ValueError(
                f"virus name must be given exactly when status is FOUND "
                f"(status={self.status.name}, virus={self.virus!r})"
            )

    @property
    def is_clean(self) -> bool:
        return self.status is ScanStatus.OK

    @property
    def is_infected(self) -> bool:
        return self.status is ScanStatus.FOUND

    @classmethod
    def from_bytes(cls, raw: bytes) -> ScanResult:
        """Classify a raw response that still ends with its terminator byte.

        Bytes outside ASCII are replaced rather than rejected, so this never
        raises for daemon output.
        """
        return cls.from_text(raw[:-1].decode("ascii", errors="replace"))

    @classmethod
    def from_text(cls, text: str) -> ScanResult:
        """Classify response text that has already had its terminator removed.

        Checks run in a fixed order and each one matches the whole text:
        ``stream: OK``, then ``stream: <name> FOUND``, then the size limit
        error. Anything else is :attr:`ScanStatus.UNKNOWN`.
        """
        if text == RESPONSE_OK:
            return cls(text, ScanStatus.OK)

        virus = _found_name(text)
        if virus is not None:
            return cls(text, ScanStatus.FOUND, virus)

        if text == RESPONSE_TOO_BIG:
            return cls(text, ScanStatus.ERROR_TOO_BIG)

        return cls(text, ScanStatus.UNKNOWN)


def _found_name(text: str) -> str | None:
    # The name is everything between the fixed prefix and the final suffix.
    if not (text.startswith(FOUND_PREFIX) and text.endswith(FOUND_SUFFIX)):
        return None
    name = text[len(FOUND_PREFIX) : len(text) - len(FOUND_SUFFIX)]
    if not name or "\n" in name or "\r" in name:
        return None
    return name
