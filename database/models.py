"""
SQLAlchemy ORM models for accounts, profile details and avatars.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(30), primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    username = Column(String(30), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    account_type = Column(String(16), nullable=False, default="native")
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    details = relationship("UserDetails", uselist=False, cascade="all, delete-orphan")
    avatar = relationship("Avatar", uselist=False, cascade="all, delete-orphan")


class UserDetails(Base):
    __tablename__ = "user_details"

    user_id = Column(String(30), ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    avatar = Column(String(512), nullable=False, default="")
    username = Column(String(30), nullable=False, default="")
    phone = Column(BigInteger, nullable=True)
    twitter = Column(String(128), nullable=False, default="")
    discord = Column(String(128), nullable=False, default="")
    google = Column(String(128), nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Avatar(Base):
    __tablename__ = "avatars"

    user_id = Column(String(30), ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    filename = Column(String(512), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
