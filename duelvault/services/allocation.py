"""
Allocation tracking.

Splits owned copies of each print into copies committed to decks and
copies still in storage.

INVARIANT: For every print, quantity >= copies referenced by all decks.
`set_quantity` is the single gate for changing quantities and the only
path that deletes a CardRecord.
"""

import logging
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import replace

from duelvault.models.card import CardRecord
from duelvault.models.deck import Deck
from duelvault.models.failure import InUseError, NotFoundError, Result

logger = logging.getLogger(__name__)


def card_usage(decks: Sequence[Deck]) -> Counter[str]:
    """Card id -> occurrences across main, extra and side of every deck."""
    usage: Counter[str] = Counter()
    for deck in decks:
        usage.update(deck.all_card_ids())
    return usage


def available_for(card_id: str, total_quantity: int, usage: Mapping[str, int]) -> int:
    """Copies of a print not committed to any deck."""
    return max(0, total_quantity - usage.get(card_id, 0))


def set_quantity(
    collection: Sequence[CardRecord],
    decks: Sequence[Deck],
    card_id: str,
    new_quantity: int,
) -> Result[list[CardRecord]]:
    """
    Set the owned quantity of a print.

    Quantities are clamped at zero. Shrinking below the copies used by
    decks is refused with InUseError and nothing changes. Zero removes
    the record.

    Returns:
        Result holding the new collection, or InUseError / NotFoundError.
    """
    if not any(card.id == card_id for card in collection):
        return Result.failure(NotFoundError("card", card_id))

    quantity = max(0, new_quantity)
    in_use = card_usage(decks).get(card_id, 0)

    if quantity < in_use:
        logger.info(
            "quantity_rejected",
            extra={"card_id": card_id, "requested": quantity, "in_use": in_use},
        )
        return Result.failure(InUseError(card_id, requested=quantity, in_use=in_use))

    if quantity == 0:
        logger.info("card_removed", extra={"card_id": card_id})
        return Result.success([card for card in collection if card.id != card_id])

    return Result.success(
        [replace(card, quantity=quantity) if card.id == card_id else card for card in collection]
    )
