import uuid
from datetime import datetime, timezone

import config
from database import Base
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship


def new_id() -> str:
    return uuid.uuid4().hex

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(320), unique=True, index=True, nullable=False)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(16), nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    urls = relationship("ShortUrl", back_populates="owner")


class ShortUrl(Base):
    __tablename__ = "short_urls"

    id = Column(String(32), primary_key=True, default=new_id)
    short_id = Column(String(16), unique=True, index=True, nullable=False)
    original_url = Column(String(2048), nullable=False)
    title = Column(String(255), nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)
    clicks = Column(Integer, nullable=False, default=0)
    last_accessed_at = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    owner_id = Column(String(32), ForeignKey("users.id"), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    owner = relationship("User", back_populates="urls")

    @property
    def short_url(self) -> str:
        return f"{config.PUBLIC_BASE_URL}/{self.short_id}"

    @property
    def owner_email(self) -> str:
        return self.owner.email if self.owner else "Unknown"
