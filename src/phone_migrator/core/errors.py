"""
Migration error types.

Every failure an asynchronous wizard operation can produce is one of these.
The operations layer catches them and hands them back to the state machine
as the error value of a completion event.
"""


class MigrationError(Exception):
    """Base exception for migration failures."""

    def __init__(self, message: str, path: str | None = None):
        """
        Initialize migration error.

        Args:
            message: Error message
            path: File involved in the failure (if any)
        """
        super().__init__(message)
        self.path = path


class SourceReadError(MigrationError):
    """Raised when the source file cannot be read."""
    pass


class SourceParseError(MigrationError):
    """Raised when the source file is not a valid schema document."""
    pass


class UnsupportedPathError(MigrationError):
    """Raised when a source/target schema pair is not implemented."""
    pass


class OutputWriteError(MigrationError):
    """Raised when the target document cannot be serialized or written."""
    pass


class PlanParseError(MigrationError):
    """Raised when the plan service reply holds no usable plan document."""
    pass


class UserCancelledError(MigrationError):
    """Raised when the user declines the proposed migration plan."""

    def __init__(self, message: str = "migration cancelled by user"):
        super().__init__(message)
