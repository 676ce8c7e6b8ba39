"""
Collection search service.

Filtered search, sorting and summaries over a user's CardRecords.

Supports views like:
- "Every Synchro I own" -> tags=["Synchro"]
- "LIGHT Level 4 monsters" -> main_type="Monster", attribute="LIGHT", level=4
- "Cards from sets released before 2005" -> released_before="2005-01-01"
- "Anything mentioning 'destroy'" -> query="destroy" (names and descriptions,
  English and Portuguese)
"""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Any

from duelvault.models.card import CardRecord
from duelvault.models.failure import InvalidInputError
from duelvault.models.rarity import rarity_rank

logger = logging.getLogger(__name__)

SORT_FIELDS = ("name", "rarity", "collection", "date")
DEFAULT_SORT = "date-desc"

MAIN_TYPES = ("Monster", "Spell", "Trap")


def _matches_query(card: CardRecord, query: str) -> bool:
    haystacks = (card.name, card.name_pt, card.description, card.description_pt)
    return any(text and query in text.lower() for text in haystacks)


def search_collection(
    cards: Iterable[CardRecord],
    # Free text
    query: str | None = None,
    # Type filters
    main_type: str | None = None,
    tags: Sequence[str] | None = None,
    # Monster filters
    attribute: str | None = None,
    level: int | None = None,
    # Print filters
    rarity: str | None = None,
    collection_code: str | None = None,
    released_before: str | None = None,
) -> list[CardRecord]:
    """
    Filter a collection. All filters are ANDed together.

    Args:
        cards: CardRecords to search
        query: Case-insensitive substring of name, name_pt, description or
            description_pt
        main_type: Substring of the display type ("Monster" matches
            "Synchro Monster")
        tags: Card must carry ALL of these type tags (races, subtypes,
            spell/trap kinds)
        attribute: Exact attribute, e.g. "DARK"
        level: Exact level / rank
        rarity: Exact rarity
        collection_code: Case-insensitive set code prefix, e.g. "LOB"
        released_before: ISO date; cards without a release date never match

    Returns:
        Matching records in their original order.
    """
    needle = query.strip().lower() if query else ""
    results: list[CardRecord] = []

    for card in cards:
        if needle and not _matches_query(card, needle):
            continue

        if main_type and main_type not in card.display_type:
            continue

        if tags and not all(card.has_tag(tag) for tag in tags):
            continue

        if attribute and card.attribute != attribute:
            continue

        if level is not None and card.level != level:
            continue

        if rarity and card.rarity != rarity:
            continue

        if collection_code and not card.collection_code.upper().startswith(
            collection_code.upper()
        ):
            continue

        # ISO dates compare correctly as strings
        if released_before:
            if not card.release_date or card.release_date > released_before:
                continue

        results.append(card)

    return results


def _sort_key(field: str) -> Any:
    if field == "name":
        return lambda card: card.name.casefold()
    if field == "rarity":
        return lambda card: rarity_rank(card.rarity)
    if field == "collection":
        return lambda card: card.collection_code.casefold()
    return lambda card: card.date_added


def parse_sort_order(sort_order: str) -> tuple[str, bool]:
    """
    Split "field-direction" into (field, descending).

    Raises:
        InvalidInputError: If the field or direction is unknown
    """
    field, _, direction = sort_order.partition("-")
    if field not in SORT_FIELDS or direction not in ("asc", "desc"):
        raise InvalidInputError(
            f"Unknown sort order '{sort_order}'.",
            detail=f"Use one of {', '.join(SORT_FIELDS)} followed by -asc or -desc.",
        )
    return field, direction == "desc"


def sort_collection(cards: Iterable[CardRecord], sort_order: str = DEFAULT_SORT) -> list[CardRecord]:
    """Sort records by name, rarity, collection code or date added. Stable."""
    field, descending = parse_sort_order(sort_order)
    return sorted(cards, key=_sort_key(field), reverse=descending)


def get_collection_summary(cards: Sequence[CardRecord]) -> dict[str, Any]:
    """
    Summary statistics for a collection.

    Returns totals plus breakdowns by rarity and main card type.
    """
    by_rarity: Counter[str] = Counter()
    by_type: Counter[str] = Counter()

    for card in cards:
        by_rarity[card.rarity] += card.quantity
        main = next((t for t in MAIN_TYPES if t in card.display_type), None)
        by_type[main or "Monster"] += card.quantity

    return {
        "total_cards": sum(card.quantity for card in cards),
        "unique_cards": len({card.name for card in cards}),
        "prints": len(cards),
        "by_rarity": dict(sorted(by_rarity.items(), key=lambda item: rarity_rank(item[0]))),
        "by_type": dict(by_type),
    }
