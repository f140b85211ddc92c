"""
Error taxonomy for the auto-cancellation run.

Configuration, scan and cancellation failures are hard failures and abort the
run. Quote cleanup failures are reported as warnings on the outcome instead.
"""


class AutoCancelError(Exception):
    """Base error carrying the flat message reported to callers."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AutoCancelError):
    """Persistence credentials or endpoint are not configured."""

    # Returned to callers instead of the detailed message
    public_message = "Server configuration error"


class ScanError(AutoCancelError):
    """Reading overdue appointments failed; nothing was touched."""


class CancellationError(AutoCancelError):
    """The conditional cancellation update failed."""


class ServiceAuthError(AutoCancelError):
    """The caller did not present the service credential."""
