from typing import Dict, List, Optional


class FlashdeckError(Exception):
    """Base exception for flashdeck."""

    pass


class UnauthorizedError(FlashdeckError):
    """Raised when an operation is attempted without a valid credential."""

    pass


class NotFoundOrUnauthorizedError(FlashdeckError):
    """Raised when a deck or card does not exist or belongs to another user.

    Both outcomes are collapsed into one so callers cannot probe for the
    existence of other users' records.
    """

    pass


class ValidationFailedError(FlashdeckError):
    """Raised when input to a deck or card mutation fails validation."""

    def __init__(self, field_errors: Dict[str, List[str]]):
        self.field_errors = field_errors
        summary = "; ".join(
            f"{field}: {', '.join(messages)}"
            for field, messages in field_errors.items()
        )
        super().__init__(f"Validation failed: {summary}")


class DatabaseError(FlashdeckError):
    """Base exception for database-related errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class DatabaseConnectionError(DatabaseError):
    """Raised for errors connecting to the database."""

    pass


class SchemaInitializationError(DatabaseError):
    """Raised for errors during schema setup."""

    pass


class DeckOperationError(DatabaseError):
    """Raised for errors during deck operations (CRUD)."""

    pass


class CardOperationError(DatabaseError):
    """Raised for errors during card operations (CRUD)."""

    pass


class MarshallingError(DatabaseError):
    """Indicates an error during data conversion between application models
    and DB format."""

    pass
