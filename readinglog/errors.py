"""Exception types for readinglog.

Every error carries a ``user_message`` that is safe to show in an alert; the
regular exception message is meant for logs.
"""


class ReadingLogError(Exception):
    """Base exception for readinglog errors."""

    default_user_message = "Something went wrong. Please try again."

    def __init__(self, message: str = "", user_message: str = None):
        self.user_message = user_message or self.default_user_message
        super().__init__(message or self.user_message)


class ValidationError(ReadingLogError):
    """Raised for bad input before any network or database call is made."""

    default_user_message = "Please check your input and try again."


class AuthenticationRequiredError(ValidationError):
    """Raised when a write needs a signed-in user and there is none."""

    default_user_message = "Please sign in to continue."


class InvalidBookReferenceError(ValidationError):
    """Raised when a book reference cannot be a valid identifier."""

    def __init__(self, token: str, reason: str = "not a valid book identifier"):
        self.token = token
        super().__init__(f"Invalid book reference {token!r}: {reason}")


class BookNotFoundError(ValidationError):
    """Raised when a dependent write references a book row that does not exist."""

    default_user_message = "That book could not be found."

    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Book {book_id} does not exist")


class BackendError(ReadingLogError):
    """Raised when the database rejects or fails an operation."""

    def __init__(self, message: str = "", original_error: Exception = None):
        self.original_error = original_error
        if original_error and not message:
            message = f"Backend error: {original_error}"
        super().__init__(message)


class UniqueViolationError(BackendError):
    """Raised when an insert hits a uniqueness constraint."""


class CatalogError(ReadingLogError):
    """Raised when the external book catalog is unreachable or answers with an error."""

    def __init__(self, message: str = "", status_code: int = None):
        self.status_code = status_code
        super().__init__(message)


class ReconciliationError(ReadingLogError):
    """Raised when an external catalog id cannot be mapped to an internal book."""

    default_user_message = "Could not add book to database. Please try again."

    def __init__(self, google_books_id: str, reason: str = ""):
        self.google_books_id = google_books_id
        msg = f"Could not reconcile catalog id {google_books_id}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
