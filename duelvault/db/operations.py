"""
Database operations for user libraries.

Libraries are persisted as whole snapshots: every accepted mutation is
followed by `save_library`, which replaces the stored collection, decks
and artwork preferences in one write. Loading always runs the stored
JSON through the collection migrator.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.models.db import UserLibraryDB
from duelvault.models.library import CollectionStore
from duelvault.services.collection_migrator import migrate_library

logger = logging.getLogger(__name__)


async def get_library(session: AsyncSession, user_id: str) -> UserLibraryDB | None:
    """
    Get a user's library row by user_id.

    Returns None if no library exists for this user.
    """
    result = await session.execute(select(UserLibraryDB).where(UserLibraryDB.user_id == user_id))
    return result.scalar_one_or_none()


def library_to_store(row: UserLibraryDB) -> CollectionStore:
    """Convert a stored row into a canonical store via the migrator."""
    return migrate_library(
        {
            "collection": row.cards,
            "decks": row.decks,
            "artworkPrefs": row.artwork_prefs,
        }
    )


async def load_library(session: AsyncSession, user_id: str) -> CollectionStore:
    """
    Load a user's library.

    A user without a stored library gets an empty store.
    """
    row = await get_library(session, user_id)
    if row is None:
        return CollectionStore()
    return library_to_store(row)


async def save_library(
    session: AsyncSession, user_id: str, store: CollectionStore
) -> UserLibraryDB:
    """
    Replace a user's stored library with a snapshot.

    Creates the row on first save.
    """
    payload = store.to_dict()
    row = await get_library(session, user_id)
    if row is None:
        row = UserLibraryDB(user_id=user_id)
        session.add(row)

    row.cards = payload["cards"]
    row.decks = payload["decks"]
    row.artwork_prefs = payload["artworkPrefs"]

    await session.flush()
    logger.debug(
        "library_saved",
        extra={"user_id": user_id, "prints": len(store.cards), "decks": len(store.decks)},
    )
    return row


async def delete_library(session: AsyncSession, user_id: str) -> bool:
    """
    Delete a user's library.

    Returns True if deleted, False if not found.
    """
    row = await get_library(session, user_id)
    if row is None:
        return False

    await session.delete(row)
    return True
