import auth
import crud
import database
import schemas
from fastapi import APIRouter, Depends
from rate_limit import RateLimit, api_limiter

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(RateLimit(api_limiter)), Depends(auth.require_admin)],
)


@router.get("/users", response_model=schemas.AdminUsersResponse)
def list_users(db=Depends(database.get_db)):
    return {"success": True, "data": crud.list_users(db)}

@router.get("/urls", response_model=schemas.AdminUrlsResponse)
def list_urls(db=Depends(database.get_db)):
    return {"success": True, "data": crud.list_all_urls(db)}
