"""
Collection migration service.

The ONLY entry point for reading persisted or imported library data. Any
shape a previous version of the app wrote (bare card arrays, backup
containers, records carrying legacy race/subType fields) is turned into
canonical CardRecords and Decks.

INVARIANTS:
- A malformed record is skipped; its siblings are still migrated
- A corrupt top-level value yields an empty result, never an exception
- Migration is idempotent: migrating migrated output changes nothing
- Records without a real dateAdded get synthetic timestamps that keep
  their original relative order
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from duelvault.models.card import CardRecord
from duelvault.models.deck import Deck
from duelvault.models.failure import MalformedRecordError
from duelvault.models.library import CollectionStore
from duelvault.models.rarity import normalize_rarity
from duelvault.services.clock import now_ms
from duelvault.services.type_classifier import classify_type

logger = logging.getLogger(__name__)

# Spacing between synthetic dateAdded values for legacy records
SYNTHETIC_DATE_STEP_MS = 1000


@dataclass
class MigrationResult:
    """Result of migrating a raw collection."""

    cards: list[CardRecord]
    """Canonical records, in original order."""

    skipped: list[MalformedRecordError] = field(default_factory=list)
    """One entry per record that could not be migrated."""

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, int | float):
        return str(value)
    return None


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _quantity(value: Any) -> int:
    quantity = _optional_int(value)
    if quantity is None:
        return 1
    return max(0, quantity)


def _tag_list(value: Any) -> list[str] | None:
    if isinstance(value, list | tuple):
        return [tag for tag in value if isinstance(tag, str)]
    return None


def _migrate_record(item: Mapping[str, Any], index: int, total: int, now: int) -> CardRecord:
    card_id = item.get("id")
    if not isinstance(card_id, str) or not card_id.strip():
        raise MalformedRecordError(index, "missing card id")

    typeline = item.get("typeline")
    classification = classify_type(
        item.get("type"),
        _tag_list(item.get("typeTags")),
        race=_optional_str(item.get("race")),
        sub_type=_optional_str(item.get("subType")),
        frame_type=_optional_str(item.get("frameType")),
        typeline=_tag_list(typeline),
    )

    date_added = _optional_int(item.get("dateAdded"))
    if not date_added:
        date_added = now - (total - index) * SYNTHETIC_DATE_STEP_MS

    return CardRecord(
        id=card_id,
        card_code=_optional_str(item.get("cardCode")) or "",
        name=_optional_str(item.get("name")) or "",
        name_pt=_optional_str(item.get("name_pt")),
        display_type=classification.display_type,
        type_tags=classification.type_tags,
        attribute=_optional_str(item.get("attribute")),
        level=_optional_int(item.get("level")),
        atk=_optional_int(item.get("atk")),
        def_=_optional_int(item.get("def")),
        description=_optional_str(item.get("description")),
        description_pt=_optional_str(item.get("description_pt")),
        image_url=_optional_str(item.get("imageUrl")) or "",
        collection_code=_optional_str(item.get("collectionCode")) or "",
        collection_name=_optional_str(item.get("collectionName")),
        release_date=_optional_str(item.get("releaseDate")),
        rarity=normalize_rarity(item.get("rarity")),
        quantity=_quantity(item.get("quantity")),
        date_added=date_added,
    )


def migrate_collection_with_report(raw: Any, now: int | None = None) -> MigrationResult:
    """
    Migrate a raw collection array and report skipped records.

    Args:
        raw: Previously persisted collection (expected: list of objects)
        now: Reference time in epoch ms for synthetic dates (defaults to now)

    Returns:
        MigrationResult with canonical cards and skipped-record errors.
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning(
                "collection_blob_corrupt",
                extra={"received_type": type(raw).__name__},
            )
        return MigrationResult(cards=[])

    reference = now if now is not None else now_ms()
    candidates = [item for item in raw if isinstance(item, Mapping)]
    dropped_entries = len(raw) - len(candidates)

    cards: list[CardRecord] = []
    skipped: list[MalformedRecordError] = []
    for index, item in enumerate(candidates):
        try:
            cards.append(_migrate_record(item, index, len(candidates), reference))
        except MalformedRecordError as e:
            skipped.append(e)
            logger.debug("record_skipped", extra={"index": index, "reason": e.reason})
        except (TypeError, ValueError, AttributeError) as e:
            skipped.append(MalformedRecordError(index, f"{type(e).__name__}: {e}"))
            logger.debug("record_skipped", extra={"index": index, "reason": str(e)})

    if skipped or dropped_entries:
        logger.info(
            "collection_migrated",
            extra={
                "migrated_count": len(cards),
                "skipped_count": len(skipped),
                "dropped_non_objects": dropped_entries,
                "skipped_reasons": [e.reason for e in skipped[:10]],
            },
        )

    return MigrationResult(cards=cards, skipped=skipped)


def migrate_collection(raw: Any, now: int | None = None) -> list[CardRecord]:
    """Migrate any historical collection shape into canonical CardRecords."""
    return migrate_collection_with_report(raw, now).cards


def _card_id_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list | tuple):
        return ()
    return tuple(card_id for card_id in value if isinstance(card_id, str))


def migrate_decks(raw: Any, now: int | None = None) -> list[Deck]:
    """
    Migrate persisted decks.

    Entries that are not objects or lack an id / name are dropped.
    Missing or non-list sections become empty.
    """
    if not isinstance(raw, list):
        return []

    reference = now if now is not None else now_ms()
    decks: list[Deck] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        deck_id = _optional_str(item.get("id"))
        name = item.get("name")
        if not deck_id or not isinstance(name, str) or not name:
            continue
        date_created = _optional_int(item.get("dateCreated")) or reference
        decks.append(
            Deck(
                id=deck_id,
                name=name,
                main_deck=_card_id_list(item.get("mainDeck")),
                extra_deck=_card_id_list(item.get("extraDeck")),
                side_deck=_card_id_list(item.get("sideDeck")),
                date_created=date_created,
                date_updated=_optional_int(item.get("dateUpdated")) or date_created,
            )
        )
    return decks


def _artwork_prefs(raw: Any) -> dict[str, int]:
    if not isinstance(raw, Mapping):
        return {}
    prefs: dict[str, int] = {}
    for code, artwork_id in raw.items():
        parsed = _optional_int(artwork_id)
        if isinstance(code, str) and code and parsed is not None:
            prefs[code] = parsed
    return prefs


def migrate_library(raw: Any, now: int | None = None) -> CollectionStore:
    """
    Migrate a whole persisted library or backup file.

    Accepted shapes:
        - [card, ...]                                       (collection only)
        - {"collection": [...], "decks": [...], "artworkPrefs": {...}}
        - {"cards": [...], "decks": [...], "artworkPrefs": {...}}

    Anything else yields an empty store.
    """
    if isinstance(raw, list):
        return CollectionStore(cards=tuple(migrate_collection(raw, now)))

    if not isinstance(raw, Mapping):
        logger.warning(
            "library_blob_corrupt",
            extra={"received_type": type(raw).__name__},
        )
        return CollectionStore()

    if isinstance(raw.get("collection"), list):
        cards_raw = raw["collection"]
    elif isinstance(raw.get("cards"), list):
        cards_raw = raw["cards"]
    else:
        logger.warning(
            "library_blob_corrupt",
            extra={"received_keys": sorted(str(k) for k in raw.keys())[:10]},
        )
        return CollectionStore()

    return CollectionStore(
        cards=tuple(migrate_collection(cards_raw, now)),
        decks=tuple(migrate_decks(raw.get("decks"), now)),
        artwork_prefs=_artwork_prefs(raw.get("artworkPrefs")),
    )
