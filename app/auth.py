import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import config
import crud
import database
import models
from errors import Forbidden, Unauthorized
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

logger = logging.getLogger("snaplinks.auth")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()

def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())

def authenticate_user(db: Session, email: str, password: str) -> models.User | None:
    user = crud.get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user

def create_access_token(user: models.User, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": user.id, "email": user.email, "role": user.role, "exp": expire}
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)

def get_current_user(
    token: str | None = Depends(oauth2_scheme), db: Session = Depends(database.get_db)
) -> models.User:
    if not token:
        raise Unauthorized("No token provided")
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        raise Unauthorized("Invalid or expired token")
    user = crud.get_user(db, payload.get("sub") or "")
    if not user:
        raise Unauthorized("Invalid or expired token")
    return user

def require_admin(user: models.User = Depends(get_current_user)) -> models.User:
    if user.role != "admin":
        raise Forbidden("Admin access only")
    return user

def ensure_admin(db: Session) -> models.User | None:
    """Create or promote the ADMIN_EMAIL account when admin credentials are configured."""
    if not config.ADMIN_EMAIL or not config.ADMIN_PASSWORD:
        return None
    user = crud.get_user_by_email(db, config.ADMIN_EMAIL)
    if not user:
        logger.info("Creating admin account %s", config.ADMIN_EMAIL)
        return crud.create_user(db, config.ADMIN_EMAIL, hash_password(config.ADMIN_PASSWORD), role="admin")
    if user.role != "admin":
        logger.info("Promoting %s to admin", user.email)
        return crud.set_role(db, user, "admin")
    return user
