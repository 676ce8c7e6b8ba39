"""
Deck API endpoints.

Create, save, delete and edit a user's decks. Card additions follow the
deck construction rules (copy limit, section capacity, extra deck
routing) and only use copies not committed to other decks, whether a
card is added on its own or a whole deck is saved at once.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.db import load_library, save_library
from duelvault.db.database import get_session
from duelvault.models.deck import Deck, DeckSection
from duelvault.models.failure import NoCopiesAvailableError, NotFoundError
from duelvault.models.library import CollectionStore
from duelvault.services.deck_editor import (
    DEFAULT_DECK_NAME,
    add_card_to_deck,
    compute_availability,
    create_deck,
    deck_warnings,
    delete_deck,
    rebuild_deck,
    remove_card_from_deck,
    save_deck,
)

router = APIRouter(prefix="/library/{user_id}/decks", tags=["decks"])


class DeckResponse(BaseModel):
    """Response model for a single deck."""

    deck: dict[str, Any]
    warnings: list[str] = Field(
        default_factory=list,
        description="Soft validation messages (e.g. main deck under 40)",
    )
    missing_cards: list[str] = Field(
        default_factory=list,
        description="Card ids referenced by the deck that are no longer in the collection",
    )


class DeckCreateRequest(BaseModel):
    name: str = DEFAULT_DECK_NAME


class DeckSaveRequest(BaseModel):
    """Request model for saving a deck as a whole."""

    name: str = Field(..., min_length=1)
    main_deck: list[str] = Field(default_factory=list)
    extra_deck: list[str] = Field(default_factory=list)
    side_deck: list[str] = Field(default_factory=list)


class DeckCardRequest(BaseModel):
    card_id: str
    section: DeckSection | None = Field(
        default=None,
        description="Only 'side' is honored as-is; main/extra follow the card's type",
    )


class DeckDeleteResponse(BaseModel):
    deck_id: str
    deleted: bool


def _deck_response(deck: Deck, store: CollectionStore) -> DeckResponse:
    owned = store.card_map()
    return DeckResponse(
        deck=deck.to_dict(),
        warnings=deck_warnings(deck),
        missing_cards=sorted({card_id for card_id in deck.all_card_ids() if card_id not in owned}),
    )


def _require_deck(store: CollectionStore, deck_id: str) -> Deck:
    deck = store.get_deck(deck_id)
    if deck is None:
        raise NotFoundError("deck", deck_id)
    return deck


@router.post("", response_model=DeckResponse)
async def create_user_deck(
    user_id: str,
    request: DeckCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Create an empty deck."""
    store = await load_library(session, user_id)
    deck = create_deck(request.name)
    store = store.with_decks(save_deck(store.decks, deck, now=deck.date_created))
    await save_library(session, user_id, store)
    return _deck_response(deck, store)


@router.get("/{deck_id}", response_model=DeckResponse)
async def get_user_deck(
    user_id: str,
    deck_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Get a deck with its soft validation warnings."""
    store = await load_library(session, user_id)
    return _deck_response(_require_deck(store, deck_id), store)


@router.put("/{deck_id}", response_model=DeckResponse)
async def save_user_deck(
    user_id: str,
    deck_id: str,
    request: DeckSaveRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """
    Save a deck as a whole (replace or create by id).

    Cards go through the same rules as single additions: refused with 409
    when a print has no free copy left or a copy limit or section capacity
    would be exceeded, and with 404 for unowned ids. Extra deck monsters
    land in the extra deck whichever of main / extra they were sent in.
    Incomplete decks are accepted; shortfalls are reported as warnings.
    """
    store = await load_library(session, user_id)
    existing = store.get_deck(deck_id)
    template = existing if existing is not None else create_deck(request.name)
    deck = Deck(
        id=deck_id,
        name=request.name,
        main_deck=tuple(request.main_deck),
        extra_deck=tuple(request.extra_deck),
        side_deck=tuple(request.side_deck),
        date_created=template.date_created,
        date_updated=template.date_updated,
    )
    deck = rebuild_deck(deck, store.cards, store.decks).unwrap()
    store = store.with_decks(save_deck(store.decks, deck))
    await save_library(session, user_id, store)
    return _deck_response(_require_deck(store, deck_id), store)


@router.delete("/{deck_id}", response_model=DeckDeleteResponse)
async def delete_user_deck(
    user_id: str,
    deck_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckDeleteResponse:
    """Delete a deck. Its cards become available again."""
    store = await load_library(session, user_id)
    if store.get_deck(deck_id) is None:
        return DeckDeleteResponse(deck_id=deck_id, deleted=False)
    store = store.with_decks(delete_deck(store.decks, deck_id))
    await save_library(session, user_id, store)
    return DeckDeleteResponse(deck_id=deck_id, deleted=True)


@router.post("/{deck_id}/cards", response_model=DeckResponse)
async def add_card_to_user_deck(
    user_id: str,
    deck_id: str,
    request: DeckCardRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """
    Add one copy of an owned card to a deck.

    Refused with 409 when the copy limit or section capacity is reached,
    or when every owned copy is already in decks.
    """
    store = await load_library(session, user_id)
    deck = _require_deck(store, deck_id)
    card = store.get_card(request.card_id)
    if card is None:
        raise NotFoundError("card", request.card_id)

    if compute_availability([card], store.decks)[card.id] <= 0:
        raise NoCopiesAvailableError(card.id, card.quantity)

    updated = add_card_to_deck(deck, card, request.section).unwrap()
    store = store.with_decks(save_deck(store.decks, updated))
    await save_library(session, user_id, store)
    return _deck_response(_require_deck(store, deck_id), store)


@router.delete("/{deck_id}/cards/{card_id}", response_model=DeckResponse)
async def remove_card_from_user_deck(
    user_id: str,
    deck_id: str,
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    section: Annotated[DeckSection, Query()] = DeckSection.MAIN,
) -> DeckResponse:
    """Remove the last copy of a card from one section of a deck."""
    store = await load_library(session, user_id)
    deck = _require_deck(store, deck_id)
    store = store.with_decks(save_deck(store.decks, remove_card_from_deck(deck, card_id, section)))
    await save_library(session, user_id, store)
    return _deck_response(_require_deck(store, deck_id), store)
