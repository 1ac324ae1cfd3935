"""
Error taxonomy for the flight information write and read paths.

Every failure a caller is expected to handle is one of four kinds:
- ValidationFailed: a declared field rule rejected the command
- BusinessRuleViolation: structurally valid but semantically invalid input
- NotFound: the referenced flight does not exist
- Conflict: the supplied version token is stale

Storage failures are not part of this hierarchy and propagate
as the underlying SQLAlchemy errors.
"""

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .validation import FieldError


class FlightInformationError(Exception):
    """Base class for errors whose message can be returned to the caller."""

    default_message = "Flight information request failed."

    def __init__(self, public_message: Optional[str] = None):
        self.public_message = public_message or self.default_message
        super().__init__(self.public_message)


class ValidationFailed(FlightInformationError):
    """A command violated one or more declared field rules."""

    default_message = "Invalid request."

    def __init__(self, public_message: Optional[str] = None, errors: Optional[List["FieldError"]] = None):
        super().__init__(public_message)
        self.errors = list(errors or [])

    def to_dict(self) -> dict:
        return {
            "detail": self.public_message,
            "errors": [error.to_dict() for error in self.errors],
        }


class BusinessRuleViolation(FlightInformationError):
    """Input is well formed but breaks a business rule (time ordering, unknown airport)."""


class NotFound(FlightInformationError):
    """An object needed by the request was not found."""

    default_message = "Flight not found."


class Conflict(FlightInformationError):
    """Object has been modified by another party since it was read."""

    default_message = "Flight has been modified by another request."


__all__ = [
    'FlightInformationError',
    'ValidationFailed',
    'BusinessRuleViolation',
    'NotFound',
    'Conflict',
]
