"""
Custom exceptions for the meeting and training services.
"""


class MeetingAppError(Exception):
    """Base exception for application errors."""

    pass


class ValidationError(MeetingAppError):
    """A required field is missing or a value is out of range."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class CredentialOperationError(MeetingAppError):
    """The password hashing backend failed; callers must deny access."""

    pass


class DuplicateRegistrationError(MeetingAppError):
    """An email is already registered for a training."""

    pass


class ExportError(ValidationError):
    """Nothing to export."""

    pass


class EmailDeliveryError(MeetingAppError):
    """The mail provider rejected or failed a send."""

    pass


class AccountExistsError(MeetingAppError):
    """The email or username is already taken."""

    pass
