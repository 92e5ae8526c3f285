import logging
import math
import re

import auth
import crud
import database
import models
import qr_utils
import schemas
import shortid
from errors import NotFound, ValidationError
from fastapi import APIRouter, Depends, Query
from rate_limit import RateLimit, api_limiter

logger = logging.getLogger("snaplinks.urls")

router = APIRouter(prefix="/api/urls", tags=["urls"], dependencies=[Depends(RateLimit(api_limiter))])

URL_ID_PATTERN = re.compile(r"[0-9a-f]{32}")


def _check_id(url_id: str) -> str:
    if not URL_ID_PATTERN.fullmatch(url_id):
        raise ValidationError("Invalid URL ID format")
    return url_id

def _owned_or_404(db, url_id: str, user: models.User) -> models.ShortUrl:
    link = crud.get_owned(db, _check_id(url_id), user.id)
    if not link:
        raise NotFound("URL not found")
    return link


@router.post("", response_model=schemas.UrlResponse, status_code=201)
def create_url(
    body: schemas.UrlCreate,
    db=Depends(database.get_db),
    user: models.User = Depends(auth.get_current_user),
):
    link = shortid.create_short_url(db, user.id, body.original_url, body.title or "", body.tags)
    logger.info("Created %s -> %s by=%s", link.short_id, link.original_url, user.email)
    return {"success": True, "data": link}

@router.get("", response_model=schemas.PaginatedUrls)
def list_urls(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query("", max_length=200),
    db=Depends(database.get_db),
    user: models.User = Depends(auth.get_current_user),
):
    items, total = crud.list_owned(db, user.id, page=page, limit=limit, search=search.strip())
    return {
        "success": True,
        "data": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
            "total_items": total,
        },
    }

@router.get("/{url_id}", response_model=schemas.UrlResponse)
def get_url(url_id: str, db=Depends(database.get_db), user: models.User = Depends(auth.get_current_user)):
    return {"success": True, "data": _owned_or_404(db, url_id, user)}

@router.get("/{url_id}/stats", response_model=schemas.UrlStatsResponse)
def get_url_stats(url_id: str, db=Depends(database.get_db), user: models.User = Depends(auth.get_current_user)):
    return {"success": True, "data": _owned_or_404(db, url_id, user)}

@router.get("/{url_id}/qr", response_model=schemas.QrResponse)
def get_url_qr(url_id: str, db=Depends(database.get_db), user: models.User = Depends(auth.get_current_user)):
    link = _owned_or_404(db, url_id, user)
    return {
        "success": True,
        "data": {"short_url": link.short_url, "qr_base64": qr_utils.generate_qr_base64(link.short_url)},
    }

@router.patch("/{url_id}", response_model=schemas.UrlResponse)
def update_url(
    url_id: str,
    body: schemas.UrlUpdate,
    db=Depends(database.get_db),
    user: models.User = Depends(auth.get_current_user),
):
    link = crud.update_owned(db, _check_id(url_id), user.id, body.to_patch())
    if not link:
        raise NotFound("URL not found")
    logger.info("Updated %s fields=%s by=%s", link.short_id, sorted(body.to_patch()), user.email)
    return {"success": True, "data": link}

@router.delete("/{url_id}", response_model=schemas.MessageOut)
def delete_url(url_id: str, db=Depends(database.get_db), user: models.User = Depends(auth.get_current_user)):
    if not crud.delete_owned(db, _check_id(url_id), user.id):
        raise NotFound("URL not found")
    logger.info("Deleted %s by=%s", url_id, user.email)
    return {"success": True, "message": "URL deleted successfully"}
