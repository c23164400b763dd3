"""SQLAlchemy ORM model for the users table.

The table is owned by the Alembic migration in ``migrations/versions``;
this mapping mirrors it so queries can be expressed with SQLAlchemy Core.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ...domain.constants import UserFields


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""

    pass


class UserRecord(Base):
    """Persisted user account.

    ``password`` always holds a bcrypt hash. ``email`` is unique; the
    country index backs the filtered listing.
    """

    __tablename__ = UserFields.TABLE_NAME

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(256), nullable=False)
    last_name: Mapped[str] = mapped_column(String(256), nullable=False)
    nickname: Mapped[str] = mapped_column(String(256), nullable=False)
    password: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    country: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index(UserFields.COUNTRY_INDEX, "country"),
    )
