import models
from errors import UniquenessViolation, ValidationError
from sqlalchemy import case, delete, literal, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

# ---------- Short URLs ----------

def get_url_by_short_id(db: Session, short_id: str) -> models.ShortUrl | None:
    return db.query(models.ShortUrl).filter_by(short_id=short_id).first()

def exists_by_short_id(db: Session, short_id: str) -> bool:
    stmt = select(models.ShortUrl.id).filter_by(short_id=short_id).limit(1)
    return db.execute(stmt).first() is not None

def insert_url(db: Session, url: models.ShortUrl) -> models.ShortUrl:
    """Commit a new link; the unique index on short_id is the real guard."""
    db.add(url)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise UniquenessViolation(f"Short id '{url.short_id}' already exists") from exc
    db.refresh(url)
    return url

def get_owned(db: Session, url_id: str, owner_id: str) -> models.ShortUrl | None:
    return db.query(models.ShortUrl).filter_by(id=url_id, owner_id=owner_id).first()

def update_owned(db: Session, url_id: str, owner_id: str, patch: dict) -> models.ShortUrl | None:
    stmt = (
        update(models.ShortUrl)
        .where(models.ShortUrl.id == url_id, models.ShortUrl.owner_id == owner_id)
        .values(**patch, updated_at=models.utcnow())
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    if result.rowcount == 0:
        return None
    return get_owned(db, url_id, owner_id)

def delete_owned(db: Session, url_id: str, owner_id: str) -> bool:
    stmt = (
        delete(models.ShortUrl)
        .where(models.ShortUrl.id == url_id, models.ShortUrl.owner_id == owner_id)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount > 0

def increment_click_and_touch(db: Session, short_id: str) -> models.ShortUrl | None:
    # Single UPDATE: the database serialises concurrent increments of one row.
    # last_accessed_at only moves forward, whatever order the writers commit in.
    now = literal(models.utcnow(), models.ShortUrl.last_accessed_at.type)
    stmt = (
        update(models.ShortUrl)
        .where(models.ShortUrl.short_id == short_id, models.ShortUrl.is_active.is_(True))
        .values(
            clicks=models.ShortUrl.clicks + 1,
            last_accessed_at=case(
                (models.ShortUrl.last_accessed_at > now, models.ShortUrl.last_accessed_at),
                else_=now,
            ),
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    if result.rowcount == 0:
        return None
    return get_url_by_short_id(db, short_id)

def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

def list_owned(
    db: Session, owner_id: str, page: int = 1, limit: int = 10, search: str = ""
) -> tuple[list[models.ShortUrl], int]:
    query = db.query(models.ShortUrl).filter(models.ShortUrl.owner_id == owner_id)
    if search:
        pattern = f"%{_escape_like(search)}%"
        query = query.filter(
            or_(
                models.ShortUrl.original_url.ilike(pattern, escape="\\"),
                models.ShortUrl.title.ilike(pattern, escape="\\"),
            )
        )
    total = query.count()
    items = (
        query.order_by(models.ShortUrl.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total

def list_all_urls(db: Session) -> list[models.ShortUrl]:
    return (
        db.query(models.ShortUrl)
        .options(joinedload(models.ShortUrl.owner))
        .order_by(models.ShortUrl.created_at.desc())
        .all()
    )

# ---------- Users ----------

def get_user(db: Session, user_id: str) -> models.User | None:
    return db.get(models.User, user_id)

def get_user_by_email(db: Session, email: str) -> models.User | None:
    return db.query(models.User).filter_by(email=email.lower()).first()

def create_user(db: Session, email: str, password_hash: str, role: str = "user") -> models.User:
    user = models.User(email=email.lower(), password_hash=password_hash, role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError("Email already registered") from exc
    db.refresh(user)
    return user

def set_role(db: Session, user: models.User, role: str) -> models.User:
    user.role = role
    db.commit()
    db.refresh(user)
    return user

def list_users(db: Session) -> list[models.User]:
    return db.query(models.User).order_by(models.User.created_at.desc()).all()
