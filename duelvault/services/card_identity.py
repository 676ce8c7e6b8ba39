"""
Card identity and merge service.

A print is identified by collection code, rarity and artwork. Adding a
print that is already owned accumulates copies on the existing record;
otherwise a new record is created.

INVARIANTS:
- id == f"{collection_code}-{rarity}-{artwork_id}"
- Upserts of distinct prints commute (order does not change the result)
- Upserting the same input twice adds the copies twice
- Existing print metadata (collection name, release date) is only filled
  in when missing, never overwritten
- Changing artwork never leaves deck references pointing at a removed id
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from duelvault.models.card import ArtworkInfo, CardRecord, IdentifiedCard
from duelvault.models.deck import Deck
from duelvault.services.clock import now_ms

logger = logging.getLogger(__name__)


def resolve_identity(collection_code: str, rarity: str, artwork_id: int | str) -> str:
    """Composite identity of a print."""
    return f"{collection_code}-{rarity}-{artwork_id}"


@dataclass(frozen=True, slots=True)
class IncomingCard:
    """
    A newly identified card the user wants to add.

    Attributes:
        card_data: Metadata resolved from the card lookup
        collection_code: Print's set code (user-confirmed)
        rarity: Print's rarity (user-confirmed)
        artwork: Chosen artwork variant
        quantity: Copies to add (must be positive)
        collection_name: Set name, when known
        release_date: Set release date, when known
    """

    card_data: IdentifiedCard
    collection_code: str
    rarity: str
    artwork: ArtworkInfo
    quantity: int = 1
    collection_name: str | None = None
    release_date: str | None = None

    @property
    def card_id(self) -> str:
        return resolve_identity(self.collection_code, self.rarity, self.artwork.id)


def _new_record(incoming: IncomingCard, now: int) -> CardRecord:
    data = incoming.card_data
    return CardRecord(
        id=incoming.card_id,
        card_code=data.card_code,
        name=data.name,
        name_pt=data.name_pt,
        display_type=data.display_type,
        type_tags=data.type_tags,
        attribute=data.attribute,
        level=data.level,
        atk=data.atk,
        def_=data.def_,
        description=data.description,
        description_pt=data.description_pt,
        image_url=incoming.artwork.image_url,
        collection_code=incoming.collection_code,
        collection_name=incoming.collection_name or data.collection_name,
        release_date=incoming.release_date or data.release_date,
        rarity=incoming.rarity,
        quantity=incoming.quantity,
        date_added=now,
    )


def upsert_card(
    collection: Sequence[CardRecord],
    incoming: IncomingCard,
    now: int | None = None,
) -> list[CardRecord]:
    """
    Add copies of a print to the collection.

    Args:
        collection: Current collection (not modified)
        incoming: The identified card and print choice
        now: Creation time for a new record (epoch ms, defaults to now)

    Returns:
        New collection list.

    Raises:
        ValueError: If incoming.quantity is not positive
    """
    if incoming.quantity <= 0:
        raise ValueError(f"Quantity to add must be positive, got {incoming.quantity}")

    card_id = incoming.card_id
    updated: list[CardRecord] = []
    merged = False

    for card in collection:
        if card.id != card_id:
            updated.append(card)
            continue
        updated.append(
            replace(
                card,
                quantity=card.quantity + incoming.quantity,
                collection_name=card.collection_name or incoming.collection_name,
                release_date=card.release_date or incoming.release_date,
            )
        )
        merged = True

    if not merged:
        updated.append(_new_record(incoming, now if now is not None else now_ms()))

    logger.info(
        "card_upserted",
        extra={"card_id": card_id, "added": incoming.quantity, "merged": merged},
    )
    return updated


@dataclass(frozen=True, slots=True)
class ArtworkChange:
    """Outcome of changing a print's artwork."""

    collection: list[CardRecord]
    decks: list[Deck]
    new_id: str
    merged: bool = False


def _rewrite_deck(deck: Deck, old_id: str, new_id: str, now: int) -> Deck:
    if old_id not in deck.all_card_ids():
        return deck

    def swap(card_ids: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(new_id if card_id == old_id else card_id for card_id in card_ids)

    return replace(
        deck,
        main_deck=swap(deck.main_deck),
        extra_deck=swap(deck.extra_deck),
        side_deck=swap(deck.side_deck),
        date_updated=now,
    )


def change_artwork(
    collection: Sequence[CardRecord],
    decks: Sequence[Deck],
    card_id: str,
    new_artwork: ArtworkInfo,
    now: int | None = None,
) -> ArtworkChange:
    """
    Switch a print to another artwork.

    If a record already exists for the new identity the quantities are
    summed into it and the old record is dropped; otherwise the record is
    renamed in place. Deck references to the old id are rewritten in the
    same step.

    Raises:
        KeyError: If card_id is not in the collection
    """
    current = next((card for card in collection if card.id == card_id), None)
    if current is None:
        raise KeyError(card_id)

    new_id = resolve_identity(current.collection_code, current.rarity, new_artwork.id)
    if new_id == card_id:
        return ArtworkChange(collection=list(collection), decks=list(decks), new_id=new_id)

    timestamp = now if now is not None else now_ms()
    target = next((card for card in collection if card.id == new_id), None)

    updated: list[CardRecord] = []
    for card in collection:
        if card.id == card_id:
            if target is None:
                updated.append(replace(card, id=new_id, image_url=new_artwork.image_url))
            continue
        if card.id == new_id:
            updated.append(replace(card, quantity=card.quantity + current.quantity))
            continue
        updated.append(card)

    updated_decks = [_rewrite_deck(deck, card_id, new_id, timestamp) for deck in decks]

    logger.info(
        "artwork_changed",
        extra={"old_id": card_id, "new_id": new_id, "merged": target is not None},
    )
    return ArtworkChange(
        collection=updated,
        decks=updated_decks,
        new_id=new_id,
        merged=target is not None,
    )
