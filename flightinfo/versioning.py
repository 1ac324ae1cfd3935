"""
Version tokens and conflict detection for optimistic concurrency control.

Every persisted flight carries an opaque 128-bit version token. A new token is
generated on each successful create or update, and writers must echo back the
token they last read. Tokens are compared for equality only.
"""

import logging
import uuid
from enum import Enum
from typing import Optional, Union

from .exceptions import Conflict, ValidationFailed

logger = logging.getLogger(__name__)

# Reserved token meaning "no version supplied"
ZERO_VERSION = uuid.UUID(int=0)


class VersionCheck(str, Enum):
    """Result of comparing a stored and a supplied version token."""
    MATCH = "match"
    CONFLICT = "conflict"


def new_version_token() -> uuid.UUID:
    """Generate a fresh, non-zero version token."""
    token = uuid.uuid4()
    while token == ZERO_VERSION:
        token = uuid.uuid4()
    return token


def parse_version_token(value: Optional[Union[str, uuid.UUID]]) -> uuid.UUID:
    """
    Convert caller supplied text into a version token.

    Missing values become ZERO_VERSION so the command's RequiresValue rule
    reports them like any other empty field.

    Raises:
        ValidationFailed: If the value is not a valid UUID string
    """
    if value is None or value == "":
        return ZERO_VERSION
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationFailed(f"Version '{value}' is not a valid version token.")


def detect_conflict(stored_version: uuid.UUID, supplied_version: uuid.UUID) -> VersionCheck:
    """Compare the stored token with the one supplied by the caller."""
    if stored_version == supplied_version:
        return VersionCheck.MATCH
    return VersionCheck.CONFLICT


def ensure_version_matches(flight_id: int, stored_version: uuid.UUID, supplied_version: uuid.UUID) -> None:
    """
    Raise Conflict when the supplied token is stale.

    Must only be called once the flight is known to exist.
    """
    if detect_conflict(stored_version, supplied_version) is VersionCheck.CONFLICT:
        logger.info(f"Version conflict for flight {flight_id}: stored={stored_version} supplied={supplied_version}")
        raise Conflict()


__all__ = [
    'ZERO_VERSION',
    'VersionCheck',
    'new_version_token',
    'parse_version_token',
    'detect_conflict',
    'ensure_version_matches',
]
