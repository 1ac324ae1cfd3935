"""
Reference airport data loaded into a fresh database.
"""

import logging
from typing import Iterable, Tuple

from sqlalchemy.orm import Session

from .models import Airport

logger = logging.getLogger(__name__)

# (ICAO code, name)
REFERENCE_AIRPORTS: Tuple[Tuple[str, str], ...] = (
    ("NZAA", "Auckland International Airport"),
    ("NZWN", "Wellington International Airport"),
    ("NZCH", "Christchurch International Airport"),
    ("NZDN", "Dunedin International Airport"),
    ("NZPM", "Palmerston North Airport"),
)


def seed_airports(session: Session, airports: Iterable[Tuple[str, str]] = REFERENCE_AIRPORTS) -> int:
    """
    Insert reference airports whose code is not yet present.

    Returns:
        Number of airports added
    """
    airports = list(airports)
    existing = {
        code for (code,) in session.query(Airport.code).filter(
            Airport.code.in_([code for code, _ in airports])
        )
    }

    added = 0
    for code, name in airports:
        if code in existing:
            continue
        session.add(Airport(code=code, name=name))
        existing.add(code)
        added += 1

    if added:
        session.flush()
        logger.info(f"Seeded {added} reference airports")
    return added


__all__ = ['REFERENCE_AIRPORTS', 'seed_airports']
