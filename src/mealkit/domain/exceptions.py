"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the presentation layer can catch them uniformly.  Each error carries a
default user-facing message (``str(exc)``) plus any structured data the
caller needs to render its own text.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class CheckoutStateError(DomainException):
    """The checkout workflow is not in a state that allows the operation."""


# --- Cart errors ---------------------------------------------------------------


class InvalidQuantity(ValidationError):
    default_message = "Quantity must be at least 1."


class MaxPerItemExceeded(ValidationError):

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"You can only add up to {limit} of the same meal.")


class LineNotFound(EntityNotFoundError):

    default_message = "We couldn't find that item in your cart."

    def __init__(self, line_id: str) -> None:
        self.line_id = line_id
        super().__init__()


class CartIsEmpty(ValidationError):
    default_message = "Your cart is empty."


# --- Checkout form errors ------------------------------------------------------


class MissingName(ValidationError):
    default_message = "Please enter your full name."


class InvalidEmail(ValidationError):
    default_message = "Please enter a valid email address."


class MissingAddress(ValidationError):
    default_message = "Please enter your delivery address."


# --- Workflow state errors -----------------------------------------------------


class AlreadyInProgress(CheckoutStateError):
    default_message = "Your order is already being placed."


class OrderAlreadyPlaced(CheckoutStateError):
    default_message = "This order has already been placed."


class CartLocked(CheckoutStateError):
    default_message = "Your order is being placed. The cart can't change until it's done."
