"""Custom exceptions for the Pulse metrics core.

All vendor, persistence and configuration exceptions live here
to avoid circular imports between modules.
"""


class PulseError(Exception):
    """Base exception for all Pulse errors."""


class VendorFetchError(PulseError):
    """Raised when a vendor API cannot be reached or answers with an error status."""

    def __init__(self, vendor: str, message: str, status_code: int | None = None) -> None:
        self.vendor = vendor
        self.status_code = status_code
        if status_code is not None:
            text = f"{vendor}: {message} (HTTP {status_code})"
        else:
            text = f"{vendor}: {message}"
        super().__init__(text)


class PersistenceError(PulseError):
    """Raised when a settings or history document cannot be written."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class ConfigurationError(PulseError):
    """Raised when required configuration is missing."""
