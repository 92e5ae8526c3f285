import re
from datetime import datetime

from pydantic import (AliasChoices, AnyUrl, BaseModel, ConfigDict, EmailStr, Field, TypeAdapter,
                      ValidationError, field_validator)
from pydantic.alias_generators import to_camel

# min 8 chars, uppercase, lowercase, digit, special char
STRONG_PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{8,}$")


_any_url = TypeAdapter(AnyUrl)


def validate_absolute_url(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    try:
        url = _any_url.validate_python(value)
    except ValidationError:
        raise ValueError("Invalid URL format")
    if not url.host:
        raise ValueError("Invalid URL format")
    # Store what the client sent; AnyUrl would normalise it
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------- Links ----------

class UrlCreate(CamelModel):
    original_url: str = Field(max_length=2048)
    title: str | None = Field(default=None, max_length=255)
    tags: list[str] | None = None

    @field_validator("original_url")
    @classmethod
    def check_url(cls, value: str | None) -> str | None:
        return validate_absolute_url(value)

class UrlUpdate(CamelModel):
    original_url: str | None = Field(default=None, max_length=2048)
    title: str | None = Field(default=None, max_length=255)
    tags: list[str] | None = None
    is_active: bool | None = None

    @field_validator("original_url")
    @classmethod
    def check_url(cls, value: str | None) -> str | None:
        return validate_absolute_url(value)

    def to_patch(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)

class UrlOut(CamelModel):
    id: str
    short_id: str
    short_url: str
    original_url: str
    title: str
    tags: list[str]
    clicks: int
    created_at: datetime
    updated_at: datetime
    last_accessed_at: datetime | None
    is_active: bool

class UrlStatsOut(CamelModel):
    id: str
    short_id: str
    short_url: str
    original_url: str
    title: str
    total_clicks: int = Field(
        validation_alias=AliasChoices("clicks", "total_clicks", "totalClicks"),
        serialization_alias="totalClicks",
    )
    created_at: datetime
    last_accessed_at: datetime | None
    is_active: bool

class QrOut(CamelModel):
    short_url: str
    qr_base64: str

class Pagination(CamelModel):
    page: int
    limit: int
    total_pages: int
    total_items: int

class UrlResponse(CamelModel):
    success: bool = True
    data: UrlOut

class UrlStatsResponse(CamelModel):
    success: bool = True
    data: UrlStatsOut

class QrResponse(CamelModel):
    success: bool = True
    data: QrOut

class PaginatedUrls(CamelModel):
    success: bool = True
    data: list[UrlOut]
    pagination: Pagination

class MessageOut(CamelModel):
    success: bool = True
    message: str


# ---------- Auth ----------

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if not STRONG_PASSWORD_PATTERN.fullmatch(value):
            raise ValueError(
                "Password does not meet strength requirements. Must be at least 8 characters "
                "with uppercase, lowercase, number, and special character."
            )
        return value

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return value.lower()

class UserOut(CamelModel):
    id: str
    email: str
    role: str

class AuthData(CamelModel):
    user: UserOut
    token: str

class AuthResponse(CamelModel):
    success: bool = True
    data: AuthData

class UserResponse(CamelModel):
    success: bool = True
    data: UserOut


# ---------- Admin ----------

class AdminUserOut(UserOut):
    created_at: datetime

class AdminUrlOut(CamelModel):
    id: str
    short_id: str
    short_url: str
    original_url: str
    owner_email: str
    clicks: int
    created_at: datetime
    is_active: bool

class AdminUsersResponse(CamelModel):
    success: bool = True
    data: list[AdminUserOut]

class AdminUrlsResponse(CamelModel):
    success: bool = True
    data: list[AdminUrlOut]
