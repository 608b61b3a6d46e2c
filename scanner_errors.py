"""
Error types raised by the subdomain takeover scanner.

Catalog, target and output errors are fatal and reach the caller.
ProbeError is per-target and never escapes the dispatcher.
"""

from typing import Optional


class TakeoverScannerError(Exception):
    """Base class for all scanner errors"""


class CatalogLoadError(TakeoverScannerError):
    """Fingerprint catalog missing, unreadable or malformed"""

    def __init__(self, path: str, cause: str):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to load fingerprint catalog {path}: {cause}")


class TargetLoadError(TakeoverScannerError):
    """Target list missing or unreadable"""

    def __init__(self, path: str, cause: str):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to load targets from {path}: {cause}")


class ProbeError(TakeoverScannerError):
    """A single target could not be probed"""

    def __init__(self, target: str, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"{target}: {reason}")


class OutputWriteError(TakeoverScannerError):
    """The report sink could not be opened or written.

    ``report`` holds the scan results gathered before the failure, when known.
    """

    def __init__(self, path: str, cause: str, report: Optional[object] = None):
        self.path = path
        self.cause = cause
        self.report = report
        super().__init__(f"Failed to write report to {path or '<stdout>'}: {cause}")
