"""
Custom exceptions for hwvault.

Only ``AggregationError`` ever reaches callers of the public API. Dataset and
probe errors are captured into typed outcomes and logged.
"""

from typing import Optional


class HwVaultError(Exception):
    """Base class for all hwvault errors."""


class DatasetLoadError(HwVaultError):
    """Raised when a reference dataset file cannot be read or parsed."""

    def __init__(self, message: str, domain: str = None):
        """
        Initialize DatasetLoadError.

        Args:
            message: What went wrong while loading
            domain: Dataset domain that failed (e.g. "memory")
        """
        self.domain = domain
        full_message = f"Dataset load failed: {message}"
        if domain:
            full_message += f" (domain: {domain})"
        super().__init__(full_message)


class ProbeError(HwVaultError):
    """Raised by a probe collaborator when a component cannot be queried."""

    def __init__(self, message: str, kind: Optional[str] = None):
        self.kind = kind
        full_message = message if not kind else f"{message} (component: {kind})"
        super().__init__(full_message)


class ProbeUnavailableError(ProbeError):
    """Raised when a probe does not support a component on this platform."""


class AggregationError(HwVaultError):
    """Raised when no usable snapshot can be assembled."""

    def __init__(self, message: str, failures: Optional[dict] = None):
        self.failures = dict(failures or {})
        super().__init__(f"Snapshot aggregation failed: {message}")
