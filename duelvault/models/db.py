"""
SQLAlchemy ORM models for persistent storage.

A user's library is stored as one row of JSON snapshots. Writes always
replace the whole snapshot; reads always go through the collection
migrator.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserLibraryDB(Base):
    """
    A user's library stored in the database.

    Each user has one row holding the serialized collection, decks and
    artwork preferences. Concurrent writers are not merged: the last
    write wins.
    """

    __tablename__ = "user_libraries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    cards: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    decks: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    artwork_prefs: Mapped[dict[str, int]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<UserLibraryDB(id={self.id}, user_id={self.user_id})>"
