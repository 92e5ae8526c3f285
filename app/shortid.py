"""Short id allocation.

Candidates are random strings over a 64-character URL-safe alphabet. The
existence check here only avoids obvious collisions; the unique index on
``short_urls.short_id`` decides which insert wins a race.
"""
import logging
import re
import secrets
import string
from typing import Callable

import crud
import models
from errors import AllocationExhausted, UniquenessViolation
from sqlalchemy.orm import Session

logger = logging.getLogger("snaplinks.shortid")

ALPHABET = string.ascii_letters + string.digits + "_-"
SHORT_ID_LENGTH = 8
MAX_ALLOCATION_ATTEMPTS = 10
MAX_INSERT_ATTEMPTS = 3

SHORT_ID_PATTERN = re.compile(rf"[A-Za-z0-9_-]{{{SHORT_ID_LENGTH}}}")


def generate_short_id(length: int = SHORT_ID_LENGTH) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))

def is_well_formed(short_id: str) -> bool:
    return SHORT_ID_PATTERN.fullmatch(short_id or "") is not None


def allocate_short_id(db: Session, generate: Callable[[], str] = generate_short_id) -> str:
    """Return a short id not currently used by any link.

    Raises AllocationExhausted after MAX_ALLOCATION_ATTEMPTS collisions.
    """
    for attempt in range(1, MAX_ALLOCATION_ATTEMPTS + 1):
        candidate = generate()
        if candidate and not crud.exists_by_short_id(db, candidate):
            return candidate
        logger.warning("Short id collision on attempt %d/%d", attempt, MAX_ALLOCATION_ATTEMPTS)
    raise AllocationExhausted(
        f"Failed to generate unique short id after {MAX_ALLOCATION_ATTEMPTS} attempts"
    )


def create_short_url(
    db: Session,
    owner_id: str,
    original_url: str,
    title: str = "",
    tags: list[str] | None = None,
    generate: Callable[[], str] = generate_short_id,
) -> models.ShortUrl:
    """Allocate a short id and commit the link, retrying if an insert loses a race."""
    for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
        short_id = allocate_short_id(db, generate)
        url = models.ShortUrl(
            short_id=short_id,
            original_url=original_url,
            title=title or "",
            tags=list(tags or []),
            is_active=True,
            owner_id=owner_id,
        )
        try:
            return crud.insert_url(db, url)
        except UniquenessViolation:
            logger.warning("Insert lost race for short id %s (attempt %d/%d)",
                           short_id, attempt, MAX_INSERT_ATTEMPTS)
    raise AllocationExhausted(
        f"Failed to store a unique short id after {MAX_INSERT_ATTEMPTS} attempts"
    )
