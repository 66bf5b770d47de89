"""
Domain errors.

Each error carries the HTTP status it maps to so the error handling
middleware can translate it without knowing every subclass.
"""


class DomainError(Exception):
    """Base class for rule violations raised by the services."""

    status_code = 400
    error = "Invalid request"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    status_code = 404
    error = "Not found"


class ConflictError(DomainError):
    status_code = 409
    error = "Conflict"


class ValidationError(DomainError):
    status_code = 400
    error = "Invalid request"


class PositionOccupiedError(ConflictError):
    """A tree is already planted at the requested cell."""


class DuplicatePreBookingError(ConflictError):
    """An open prebooking already exists for the same user, seller and vegetable."""

    def __init__(self, message: str, existing_status: str):
        super().__init__(message)
        self.existing_status = existing_status


class FreeItemConflictError(ConflictError):
    """A different free item is already in the cart."""


class SellerMismatchError(ConflictError):
    """The cart already holds items from another seller."""


class InvalidCoordinatesError(ValidationError):
    """Grid cell or GPS coordinates are out of range."""


class QuantityExceedsStockError(ValidationError):
    """Requested quantity is above the seller's declared stock."""


class EmptyLayoutError(ValidationError):
    """A layout without blocks cannot be expanded."""


class EmptyCartError(ValidationError):
    """A cart without items cannot be checked out."""
