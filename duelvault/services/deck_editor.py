"""
Deck composition and legality engine.

Enforces the deck construction rules that are hard limits (copy limit,
section capacity, extra deck routing) and surfaces the soft ones (main
deck minimum) as warnings. The soft rules never block saving.

INVARIANTS:
- A deck never holds more than MAX_COPIES_PER_DECK occurrences of one card
  id across main + extra + side
- A section never grows past its capacity through add_card_to_deck
- Fusion / Synchro / Xyz / Link monsters are only routed to the extra deck
- A rejected add leaves the deck unchanged
- At most one deck is being edited at a time (DeckEditingSession)
"""

import logging
import uuid
from collections.abc import Sequence
from dataclasses import replace
from enum import Enum

from duelvault.config import (
    EXTRA_DECK_MAX,
    MAIN_DECK_MAX,
    MAIN_DECK_MIN,
    MAX_COPIES_PER_DECK,
    SIDE_DECK_MAX,
)
from duelvault.models.card import CardRecord
from duelvault.models.deck import Deck, DeckSection
from duelvault.models.failure import (
    CapacityError,
    CopyLimitError,
    FailureKind,
    KnownError,
    NoCopiesAvailableError,
    NotFoundError,
    Result,
)
from duelvault.services.allocation import available_for, card_usage
from duelvault.services.clock import now_ms
from duelvault.services.type_classifier import EXTRA_DECK_TAGS, is_extra_deck_type

logger = logging.getLogger(__name__)

SECTION_LIMITS: dict[DeckSection, int] = {
    DeckSection.MAIN: MAIN_DECK_MAX,
    DeckSection.EXTRA: EXTRA_DECK_MAX,
    DeckSection.SIDE: SIDE_DECK_MAX,
}

DEFAULT_DECK_NAME = "New Deck"


def is_extra_deck_card(card: CardRecord) -> bool:
    """True for Fusion, Synchro, Xyz and Link monsters."""
    if is_extra_deck_type(card.type_tags):
        return True
    display = card.display_type.lower()
    return any(tag.lower() in display for tag in EXTRA_DECK_TAGS)


def _target_section(card: CardRecord, requested: DeckSection | None) -> DeckSection:
    if requested is DeckSection.SIDE:
        return DeckSection.SIDE
    return DeckSection.EXTRA if is_extra_deck_card(card) else DeckSection.MAIN


def _with_section(deck: Deck, section: DeckSection, card_ids: tuple[str, ...]) -> Deck:
    if section is DeckSection.MAIN:
        return replace(deck, main_deck=card_ids)
    if section is DeckSection.EXTRA:
        return replace(deck, extra_deck=card_ids)
    return replace(deck, side_deck=card_ids)


def add_card_to_deck(
    deck: Deck,
    card: CardRecord,
    section: DeckSection | None = None,
) -> Result[Deck]:
    """
    Append one copy of a card to a deck.

    Extra deck monsters go to the extra deck and everything else to the
    main deck. The side deck is only used when asked for explicitly; a
    request for the wrong one of main / extra is rerouted.

    Returns:
        Result holding the new deck, or CopyLimitError / CapacityError.
    """
    copies = deck.copies_of(card.id)
    if copies >= MAX_COPIES_PER_DECK:
        logger.info(
            "deck_add_rejected",
            extra={"deck_id": deck.id, "card_id": card.id, "reason": "copy_limit"},
        )
        return Result.failure(CopyLimitError(card.id, MAX_COPIES_PER_DECK))

    target = _target_section(card, section)
    if section is not None and target is not section:
        logger.debug(
            "deck_add_rerouted",
            extra={"card_id": card.id, "requested": section.value, "target": target.value},
        )

    current = deck.section(target)
    limit = SECTION_LIMITS[target]
    if len(current) >= limit:
        logger.info(
            "deck_add_rejected",
            extra={"deck_id": deck.id, "card_id": card.id, "reason": "capacity"},
        )
        return Result.failure(CapacityError(target.value, limit))

    return Result.success(_with_section(deck, target, current + (card.id,)))


def rebuild_deck(
    deck: Deck,
    collection: Sequence[CardRecord],
    decks: Sequence[Deck],
) -> Result[Deck]:
    """
    Replay a submitted deck card by card through add_card_to_deck.

    Used when a whole deck is saved at once. Each id must be owned and
    still have a copy not committed to another deck (the persisted copy
    of this deck is ignored). Main / extra placement is rerouted by card
    type; side deck entries stay in the side deck.

    Returns:
        Result holding the rebuilt deck, or the first NotFoundError /
        NoCopiesAvailableError / CopyLimitError / CapacityError.
    """
    cards = {card.id: card for card in collection}
    usage = card_usage([other for other in decks if other.id != deck.id])
    rebuilt = replace(deck, main_deck=(), extra_deck=(), side_deck=())

    for section in DeckSection:
        for card_id in deck.section(section):
            card = cards.get(card_id)
            if card is None:
                return Result.failure(NotFoundError("card", card_id))
            if available_for(card_id, card.quantity, usage) <= rebuilt.copies_of(card_id):
                logger.info(
                    "deck_save_rejected",
                    extra={"deck_id": deck.id, "card_id": card_id, "reason": "no_copies"},
                )
                return Result.failure(NoCopiesAvailableError(card_id, card.quantity))
            result = add_card_to_deck(rebuilt, card, section)
            if not result.ok:
                return result
            rebuilt = result.unwrap()

    return Result.success(rebuilt)

def remove_card_from_deck(deck: Deck, card_id: str, section: DeckSection) -> Deck:
    """Remove the last occurrence of a card id from one section."""
    card_ids = list(deck.section(section))
    for index in range(len(card_ids) - 1, -1, -1):
        if card_ids[index] == card_id:
            del card_ids[index]
            return _with_section(deck, section, tuple(card_ids))
    return deck


def save_deck(decks: Sequence[Deck], deck: Deck, now: int | None = None) -> list[Deck]:
    """
    Stamp and store a deck, replacing any deck with the same id.

    Incomplete decks are saved as-is; see deck_warnings for soft checks.
    """
    stamped = replace(deck, date_updated=now if now is not None else now_ms())
    updated: list[Deck] = []
    replaced = False
    for existing in decks:
        if existing.id == stamped.id:
            updated.append(stamped)
            replaced = True
        else:
            updated.append(existing)
    if not replaced:
        updated.append(stamped)

    logger.info(
        "deck_saved",
        extra={"deck_id": stamped.id, "main": len(stamped.main_deck), "is_new": not replaced},
    )
    return updated


def deck_warnings(deck: Deck) -> list[str]:
    """Soft validation messages for display. Never blocks saving."""
    warnings: list[str] = []
    if len(deck.main_deck) < MAIN_DECK_MIN:
        warnings.append(
            f"Main deck has {len(deck.main_deck)} cards; at least {MAIN_DECK_MIN} are required."
        )
    for section, limit in SECTION_LIMITS.items():
        count = len(deck.section(section))
        if count > limit:
            warnings.append(f"{section.value.capitalize()} deck has {count} cards; max {limit}.")
    return warnings


def create_deck(name: str = DEFAULT_DECK_NAME, now: int | None = None) -> Deck:
    """Create a new empty deck."""
    timestamp = now if now is not None else now_ms()
    return Deck(
        id=uuid.uuid4().hex,
        name=name.strip() or DEFAULT_DECK_NAME,
        date_created=timestamp,
        date_updated=timestamp,
    )


def delete_deck(decks: Sequence[Deck], deck_id: str) -> list[Deck]:
    """Drop a deck by id. Its cards become available again."""
    return [deck for deck in decks if deck.id != deck_id]


def compute_availability(
    collection: Sequence[CardRecord],
    decks: Sequence[Deck],
    editing_deck: Deck | None = None,
) -> dict[str, int]:
    """
    Copies of each print not committed to any deck.

    While a deck is being edited its persisted copy (same id in `decks`)
    is ignored and the in-progress contents count instead.

    Returns:
        Mapping card id -> available copies (never negative).
    """
    if editing_deck is None:
        usage = card_usage(decks)
    else:
        usage = card_usage([deck for deck in decks if deck.id != editing_deck.id])
        usage.update(editing_deck.all_card_ids())
    return {card.id: available_for(card.id, card.quantity, usage) for card in collection}


# =============================================================================
# EDITING SESSION
# =============================================================================


class EditorState(str, Enum):
    """Deck editing session lifecycle."""

    IDLE = "idle"
    EDITING = "editing"
    SAVED = "saved"
    CANCELLED = "cancelled"


class EditorStateError(KnownError):
    """An editing operation was called outside the Editing state."""

    def __init__(self, operation: str, state: EditorState) -> None:
        self.operation = operation
        self.state = state
        super().__init__(
            kind=FailureKind.EDITOR_STATE,
            message=f"Cannot {operation} while the editor is {state.value}.",
            status_code=409,
        )


class EditorBusyError(EditorStateError):
    """Another deck is already being edited."""

    def __init__(self, deck_id: str) -> None:
        self.deck_id = deck_id
        super().__init__("begin editing", EditorState.EDITING)
        self.detail = f"deck_id={deck_id}"


class DeckEditingSession:
    """
    Single active deck editor.

    Holds a working copy of one deck. Nothing reaches the decks list until
    save(); cancel() discards the working copy.

    Example:
        session = DeckEditingSession()
        session.begin(deck)
        session.add(card)
        decks = session.save(decks)
    """

    def __init__(self) -> None:
        self._state = EditorState.IDLE
        self._deck: Deck | None = None
        self._original: Deck | None = None

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def deck(self) -> Deck | None:
        """Working copy while editing, last saved deck afterwards."""
        return self._deck

    def _require_editing(self, operation: str) -> Deck:
        if self._state is not EditorState.EDITING or self._deck is None:
            raise EditorStateError(operation, self._state)
        return self._deck

    def begin(self, deck: Deck) -> Deck:
        if self._state is EditorState.EDITING:
            raise EditorBusyError(self._deck.id if self._deck else "")
        self._state = EditorState.EDITING
        self._deck = deck
        self._original = deck
        logger.debug("deck_editing_started", extra={"deck_id": deck.id})
        return deck

    def add(self, card: CardRecord, section: DeckSection | None = None) -> Result[Deck]:
        result = add_card_to_deck(self._require_editing("add a card"), card, section)
        if result.ok:
            self._deck = result.value
        return result

    def remove(self, card_id: str, section: DeckSection) -> Deck:
        self._deck = remove_card_from_deck(self._require_editing("remove a card"), card_id, section)
        return self._deck

    def rename(self, name: str) -> Deck:
        self._deck = replace(self._require_editing("rename"), name=name)
        return self._deck

    def availability(
        self, collection: Sequence[CardRecord], decks: Sequence[Deck]
    ) -> dict[str, int]:
        """Availability with the working copy standing in for the saved deck."""
        editing = self._deck if self._state is EditorState.EDITING else None
        return compute_availability(collection, decks, editing)

    def save(self, decks: Sequence[Deck], now: int | None = None) -> list[Deck]:
        deck = self._require_editing("save")
        updated = save_deck(decks, deck, now)
        self._deck = next(d for d in updated if d.id == deck.id)
        self._original = None
        self._state = EditorState.SAVED
        return updated

    def cancel(self) -> None:
        deck = self._require_editing("cancel")
        logger.debug("deck_editing_cancelled", extra={"deck_id": deck.id})
        self._deck = self._original
        self._original = None
        self._state = EditorState.CANCELLED

