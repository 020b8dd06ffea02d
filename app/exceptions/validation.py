"""Local validation failures, raised before any network call is made."""

from app.exceptions.base import AppException


class ValidationError(AppException):
    """Business logic validation failed."""

    def __init__(self, message: str, field: str | None = None):
        """
        Create a ValidationError representing a business logic validation failure.

        Parameters:
            message (str): Human-readable error message describing the validation failure.
            field (str | None): Optional name of the field associated with the validation error; may be None if not field-specific.
        """
        self.field = field
        super().__init__(message)


class NoSelectionError(ValidationError):
    """A bulk action was requested with an empty selection."""

    kind = "no_selection"

    def __init__(
        self, message: str = "Please select at least one pending student to approve"
    ):
        super().__init__(message, field="userIds")
