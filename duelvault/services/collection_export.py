"""
Backup and export.

JSON backups carry the whole library (collection, decks, artwork
preferences) and are restored through the collection migrator, so backups
written by any earlier version load cleanly. CSV is a flat
projection of the collection for spreadsheets; importing it rebuilds the
records through the migrator as well.
"""

import csv
import io
import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from duelvault.models.card import CardRecord
from duelvault.models.failure import InvalidInputError
from duelvault.models.library import CollectionStore
from duelvault.services.collection_migrator import migrate_collection, migrate_library

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1

# Column order of the CSV projection (persisted JSON keys)
CSV_COLUMNS: tuple[str, ...] = (
    "id",
    "cardCode",
    "name",
    "name_pt",
    "type",
    "typeTags",
    "attribute",
    "level",
    "atk",
    "def",
    "description",
    "description_pt",
    "imageUrl",
    "collectionCode",
    "collectionName",
    "releaseDate",
    "rarity",
    "quantity",
    "dateAdded",
)

TAG_SEPARATOR = "|"

# Text columns round-trip verbatim; only these are normalized on import
STRIPPED_COLUMNS = frozenset({"typeTags", "level", "atk", "def", "quantity", "dateAdded"})


def export_backup(store: CollectionStore, now: datetime | None = None) -> dict[str, Any]:
    """
    Build a JSON-serializable backup of a library.

    Returns:
        {"collection", "decks", "artworkPrefs", "timestamp", "version"}
    """
    timestamp = (now or datetime.now(UTC)).isoformat()
    return {
        "collection": [card.to_dict() for card in store.cards],
        "decks": [deck.to_dict() for deck in store.decks],
        "artworkPrefs": dict(store.artwork_prefs),
        "timestamp": timestamp,
        "version": BACKUP_VERSION,
    }


def backup_filename(now: datetime | None = None) -> str:
    """Download name for a backup, e.g. duelvault-backup-2024-05-01.json."""
    return f"duelvault-backup-{(now or datetime.now(UTC)).date().isoformat()}.json"


def restore_backup(raw: Any, current: CollectionStore | None = None) -> CollectionStore:
    """
    Restore a library from a backup payload.

    A bare card array replaces the collection and clears decks. Artwork
    preferences from `current` are kept when the backup has none.

    Raises:
        InvalidInputError: If no collection data can be found in the payload
    """
    if isinstance(raw, Mapping):
        has_cards = isinstance(raw.get("collection"), list) or isinstance(raw.get("cards"), list)
        if not has_cards:
            raise InvalidInputError(
                "Invalid backup file: could not find collection data.",
                detail=f"keys={sorted(str(k) for k in raw.keys())[:10]}",
            )
    elif not isinstance(raw, list):
        raise InvalidInputError(
            "Invalid backup file: expected a JSON object or array.",
            detail=f"received={type(raw).__name__}",
        )

    restored = migrate_library(raw)
    if not restored.artwork_prefs and current is not None:
        restored = restored.with_artwork_prefs(current.artwork_prefs)

    logger.info(
        "backup_restored",
        extra={
            "prints": restored.print_count(),
            "copies": restored.total_copies(),
            "decks": len(restored.decks),
        },
    )
    return restored


def _csv_value(key: str, value: Any) -> str:
    if value is None:
        return ""
    if key == "typeTags":
        return TAG_SEPARATOR.join(value)
    return str(value)


def export_csv(cards: Iterable[CardRecord]) -> str:
    """Flat CSV of CardRecords, one column per field, tags joined with '|'."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for card in cards:
        data = card.to_dict()
        writer.writerow([_csv_value(key, data[key]) for key in CSV_COLUMNS])
    return buffer.getvalue()


def _row_to_raw(row: Mapping[str, str | None]) -> dict[str, Any]:
    raw: dict[str, Any] = {}
    for key in CSV_COLUMNS:
        value = row.get(key) or ""
        if key in STRIPPED_COLUMNS:
            value = value.strip()
        if not value:
            continue
        if key == "typeTags":
            raw[key] = [tag for tag in value.split(TAG_SEPARATOR) if tag]
        else:
            raw[key] = value
    return raw


def import_csv(text: str) -> list[CardRecord]:
    """
    Rebuild CardRecords from a CSV export.

    Rows go through the collection migrator, so bad rows are skipped and
    types are re-classified.

    Raises:
        InvalidInputError: If the header lacks the id column
    """
    reader = csv.DictReader(io.StringIO(text))
    if reader.fieldnames is None or "id" not in reader.fieldnames:
        raise InvalidInputError("Invalid CSV: missing the 'id' column.")
    return migrate_collection([_row_to_raw(row) for row in reader])
