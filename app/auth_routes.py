import logging

import auth
import crud
import database
import models
import schemas
from errors import Unauthorized, ValidationError
from fastapi import APIRouter, Depends
from rate_limit import RateLimit, api_limiter

logger = logging.getLogger("snaplinks.auth")

router = APIRouter(prefix="/api/auth", tags=["auth"], dependencies=[Depends(RateLimit(api_limiter))])


def _auth_payload(user: models.User) -> dict:
    return {"success": True, "data": {"user": user, "token": auth.create_access_token(user)}}


@router.post("/register", response_model=schemas.AuthResponse, status_code=201)
def register(body: schemas.RegisterRequest, db=Depends(database.get_db)):
    if crud.get_user_by_email(db, body.email):
        raise ValidationError("Email already registered")
    user = crud.create_user(db, body.email, auth.hash_password(body.password))
    logger.info("Registered user %s", user.email)
    return _auth_payload(user)

@router.post("/login", response_model=schemas.AuthResponse)
def login(body: schemas.LoginRequest, db=Depends(database.get_db)):
    user = auth.authenticate_user(db, body.email, body.password)
    if not user:
        logger.info("Failed login for %s", body.email)
        raise Unauthorized("Invalid email or password")
    logger.info("User %s logged in", user.email)
    return _auth_payload(user)

@router.get("/me", response_model=schemas.UserResponse)
def me(user: models.User = Depends(auth.get_current_user)):
    return {"success": True, "data": user}
