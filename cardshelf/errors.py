"""Exception classes for cardshelf."""

from typing import Dict, Optional


class Error(Exception):
    """Base class for exceptions in this package."""

    pass


class CardValidationError(Error):
    """
    Raised when card fields or search parameters are missing or malformed.
    Nothing is written when this is raised.
    """

    def __init__(self, field_errors: Dict[str, str]) -> None:
        super().__init__(field_errors)
        self.field_errors = field_errors

    def __str__(self) -> str:
        parts = [f"{field}: {message}" for field, message in self.field_errors.items()]
        return "Validation failed (" + "; ".join(parts) + ")"


class CardNotFoundError(Error):
    """Raised when an update or delete targets an id with no card."""

    def __init__(self, card_id: int) -> None:
        super().__init__(card_id)
        self.card_id = card_id

    def __str__(self) -> str:
        return f"Card {self.card_id} not found"


class ApiError(Error):
    """Raised by the HTTP client when the service answers with an error status."""

    def __init__(
        self,
        status: int,
        message: str,
        fields: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status, message)
        self.status = status
        self.message = message
        self.fields = fields or {}

    def __str__(self) -> str:
        return f"{self.status}: {self.message}"
