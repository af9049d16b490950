"""clamd SDK: Python client for the ClamAV daemon's TCP socket protocol."""

from clamd_sdk.client import ClamdClient
from clamd_sdk.config import ClamdConfig
from clamd_sdk.connection import ClamdSession
from clamd_sdk.exceptions import (
    ClamdConnectionError,
    ClamdError,
    ClamdScanAbortedError,
    ClamdTimeoutError,
)
from clamd_sdk.models import ScanResult, ScanStatus

__version__ = "0.1.0"

__all__ = [
    "ClamdClient",
    "ClamdConfig",
    "ClamdSession",
    "ScanResult",
    "ScanStatus",
    "ClamdError",
    "ClamdConnectionError",
    "ClamdTimeoutError",
    "ClamdScanAbortedError",
]
