import logging

import crud
import models
import shortid
from errors import NotFound
from sqlalchemy.orm import Session

logger = logging.getLogger("snaplinks.redirects")

# Same message for unknown and inactive ids
NOT_FOUND_MESSAGE = "Short URL not found or inactive"


def resolve_and_track(db: Session, short_id: str) -> models.ShortUrl:
    """Resolve an active short id and count the visit.

    The click is committed before this returns, so callers only redirect
    visits that were recorded.
    """
    if not shortid.is_well_formed(short_id):
        raise NotFound(NOT_FOUND_MESSAGE)

    link = crud.get_url_by_short_id(db, short_id)
    if not link or not link.is_active:
        raise NotFound(NOT_FOUND_MESSAGE)

    # Deactivated or deleted since the lookup
    link = crud.increment_click_and_touch(db, short_id)
    if not link:
        raise NotFound(NOT_FOUND_MESSAGE)

    logger.info("Redirect %s -> %s (clicks=%d)", short_id, link.original_url, link.clicks)
    return link
