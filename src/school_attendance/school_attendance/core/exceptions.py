class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class IncompleteAttendanceError(ValidationError):
    """Raised when a sheet is submitted while students are still unmarked."""

    def __init__(self, unmarked: int):
        super().__init__(f"Please mark all students before saving. ({unmarked} unmarked)")
        self.unmarked = unmarked


class NotFoundError(DomainError):
    """Raised when a class or student does not exist."""


class RepositoryError(DomainError):
    """Raised by repositories when the backing store fails."""


class LoadFailure(DomainError):
    """Raised when the roster or a day's records could not be fetched."""


class CommitFailure(DomainError):
    """Raised when the store rejected a day-sheet replacement."""
