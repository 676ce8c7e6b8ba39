"""
Library API endpoints.

Collection reads and mutations for one user's library. Every accepted
mutation is followed by a whole-library save.
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.db import delete_library, load_library, save_library
from duelvault.db.database import get_session
from duelvault.models.card import ArtworkInfo, CardRecord
from duelvault.models.failure import InvalidInputError, NotFoundError
from duelvault.models.library import CollectionStore
from duelvault.models.lookup import CardLookupResult
from duelvault.models.rarity import normalize_rarity
from duelvault.services.allocation import set_quantity
from duelvault.services.artwork_preferences import default_artwork, save_artwork_preference
from duelvault.services.card_identity import IncomingCard, change_artwork, upsert_card
from duelvault.services.card_lookup import identify_card
from duelvault.services.collection_export import (
    backup_filename,
    export_backup,
    export_csv,
    restore_backup,
)
from duelvault.services.collection_search import (
    get_collection_summary,
    search_collection,
    sort_collection,
)
from duelvault.services.deck_editor import compute_availability

router = APIRouter(prefix="/library", tags=["library"])


class LibraryResponse(BaseModel):
    """Response model for a user's library."""

    user_id: str
    cards: list[dict[str, Any]] = Field(default_factory=list)
    decks: list[dict[str, Any]] = Field(default_factory=list)
    availability: dict[str, int] = Field(
        default_factory=dict,
        description="Card id -> copies not committed to any deck",
    )
    stats: dict[str, Any] = Field(default_factory=dict)


class AddCardRequest(BaseModel):
    """Request model for adding a scanned or manually entered card."""

    lookup: CardLookupResult = Field(..., description="Card database entry for the card")
    lookup_pt: CardLookupResult | None = Field(
        default=None,
        description="Portuguese card database entry, if fetched",
    )
    variants: list[CardLookupResult] = Field(
        default_factory=list,
        description="Other entries sharing the card's name (alternate artworks)",
    )
    collection_code: str | None = Field(
        default=None,
        description="Set code read from the card, e.g. LOB-EN001",
    )
    rarity: str | None = Field(
        default=None,
        description="Rarity confirmed by the user; defaults to the matched print's rarity",
    )
    collection_name: str | None = Field(
        default=None,
        description="Set name confirmed by the user; defaults to the matched print's set",
    )
    release_date: str | None = Field(
        default=None,
        description="Set release date (YYYY-MM-DD); defaults to the matched print's date",
    )
    artwork_id: int | None = Field(
        default=None,
        description="Chosen artwork; defaults to the remembered or first artwork",
    )
    quantity: int = Field(default=1, ge=1)


class AddCardResponse(BaseModel):
    """Response model for an added card."""

    card: dict[str, Any]
    print_was_found: bool
    available: int
    total_cards: int


class QuantityRequest(BaseModel):
    quantity: int


class ArtworkRequest(BaseModel):
    artwork_id: int
    image_url: str


class ArtworkResponse(BaseModel):
    old_id: str
    new_id: str
    merged: bool


class DeleteResponse(BaseModel):
    """Response model for delete operations."""

    user_id: str
    deleted: bool
    message: str = ""


def build_library_response(
    user_id: str,
    store: CollectionStore,
    sort: str = "date-desc",
    cards: Sequence[CardRecord] | None = None,
) -> LibraryResponse:
    """Library payload; `cards` narrows the listed cards, stats always cover everything."""
    listed = store.cards if cards is None else cards
    return LibraryResponse(
        user_id=user_id,
        cards=[card.to_dict() for card in sort_collection(listed, sort)],
        decks=[deck.to_dict() for deck in store.decks],
        availability=compute_availability(store.cards, store.decks),
        stats=get_collection_summary(store.cards),
    )


@router.get("/{user_id}", response_model=LibraryResponse)
async def get_user_library(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    sort: str = "date-desc",
    q: Annotated[str | None, Query(description="Text in names or descriptions")] = None,
    main_type: Annotated[str | None, Query(description="Monster, Spell or Trap")] = None,
    tag: Annotated[list[str] | None, Query(description="Required type tags")] = None,
    attribute: str | None = None,
    level: int | None = None,
    rarity: str | None = None,
    collection_code: Annotated[str | None, Query(description="Set code prefix")] = None,
    released_before: Annotated[str | None, Query(description="ISO date, YYYY-MM-DD")] = None,
) -> LibraryResponse:
    """
    Get a user's library.

    Returns the cards matching the filters (every card when none are
    given; sorted, newest first by default), every deck, per-card
    availability and statistics for the whole collection. A user without
    a library gets an empty one.
    """
    store = await load_library(session, user_id)
    cards = search_collection(
        store.cards,
        query=q,
        main_type=main_type,
        tags=tag,
        attribute=attribute,
        level=level,
        rarity=normalize_rarity(rarity) if rarity else None,
        collection_code=collection_code,
        released_before=released_before,
    )
    return build_library_response(user_id, store, sort, cards)


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user_library(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete a user's whole library (cards, decks and preferences)."""
    deleted = await delete_library(session, user_id)
    message = "Your library has been deleted." if deleted else "No library found to delete."
    return DeleteResponse(user_id=user_id, deleted=deleted, message=message)


@router.post("/{user_id}/cards", response_model=AddCardResponse)
async def add_card(
    user_id: str,
    request: AddCardRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AddCardResponse:
    """
    Add copies of an identified card to the collection.

    Copies of a print already owned are merged into its record. The chosen
    artwork is remembered for the print's set code.
    """
    store = await load_library(session, user_id)
    outcome = identify_card(
        request.lookup,
        collection_code=request.collection_code,
        lookup_pt=request.lookup_pt,
        variants=request.variants,
    )
    card_data = outcome.card

    artwork: ArtworkInfo | None
    if request.artwork_id is not None:
        artwork = next((a for a in outcome.artworks if a.id == request.artwork_id), None)
        if artwork is None:
            raise NotFoundError("artwork", str(request.artwork_id))
    else:
        artwork = default_artwork(outcome.artworks, store.artwork_prefs, card_data.collection_code)
        if artwork is None:
            raise InvalidInputError("The card database returned no artwork for this card.")

    incoming = IncomingCard(
        card_data=card_data,
        collection_code=card_data.collection_code,
        rarity=normalize_rarity(request.rarity) if request.rarity else card_data.rarity,
        artwork=artwork,
        quantity=request.quantity,
        collection_name=request.collection_name or card_data.collection_name,
        release_date=request.release_date or card_data.release_date,
    )

    store = store.with_cards(upsert_card(store.cards, incoming)).with_artwork_prefs(
        save_artwork_preference(store.artwork_prefs, card_data.collection_code, artwork.id)
    )
    await save_library(session, user_id, store)

    record = store.get_card(incoming.card_id)
    if record is None:
        msg = f"Card {incoming.card_id} not found after upsert"
        raise RuntimeError(msg)
    return AddCardResponse(
        card=record.to_dict(),
        print_was_found=outcome.print_was_found,
        available=compute_availability([record], store.decks)[record.id],
        total_cards=store.total_copies(),
    )


@router.patch("/{user_id}/cards/{card_id}/quantity", response_model=LibraryResponse)
async def update_card_quantity(
    user_id: str,
    card_id: str,
    request: QuantityRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> LibraryResponse:
    """
    Set the owned quantity of a print.

    Zero removes the print. Refused with 409 when decks use more copies
    than requested.
    """
    store = await load_library(session, user_id)
    cards = set_quantity(store.cards, store.decks, card_id, request.quantity).unwrap()
    store = store.with_cards(cards)
    await save_library(session, user_id, store)
    return build_library_response(user_id, store)


@router.put("/{user_id}/cards/{card_id}/artwork", response_model=ArtworkResponse)
async def update_card_artwork(
    user_id: str,
    card_id: str,
    request: ArtworkRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ArtworkResponse:
    """
    Switch a print to another artwork.

    Merges into an existing record when one already has that artwork and
    rewrites deck references to the new id.
    """
    store = await load_library(session, user_id)
    current = store.get_card(card_id)
    if current is None:
        raise NotFoundError("card", card_id)

    change = change_artwork(
        store.cards,
        store.decks,
        card_id,
        ArtworkInfo(id=request.artwork_id, image_url=request.image_url),
    )
    store = (
        store.with_cards(change.collection)
        .with_decks(change.decks)
        .with_artwork_prefs(
            save_artwork_preference(
                store.artwork_prefs, current.collection_code, request.artwork_id
            )
        )
    )
    await save_library(session, user_id, store)
    return ArtworkResponse(old_id=card_id, new_id=change.new_id, merged=change.merged)


@router.post("/{user_id}/import", response_model=LibraryResponse)
async def import_backup(
    user_id: str,
    payload: Annotated[Any, Body()],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> LibraryResponse:
    """
    Restore a library from a JSON backup.

    Accepts backups from any earlier version: a bare card array, or an
    object with "collection" (or "cards"), "decks" and "artworkPrefs".
    The stored library is replaced.
    """
    current = await load_library(session, user_id)
    store = restore_backup(payload, current)
    await save_library(session, user_id, store)
    return build_library_response(user_id, store)


@router.get("/{user_id}/export")
async def export_library(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> JSONResponse:
    """Download a JSON backup of the whole library."""
    store = await load_library(session, user_id)
    now = datetime.now(UTC)
    return JSONResponse(
        content=export_backup(store, now),
        headers={"Content-Disposition": f'attachment; filename="{backup_filename(now)}"'},
    )


@router.get("/{user_id}/export.csv")
async def export_library_csv(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """Download the collection as CSV."""
    store = await load_library(session, user_id)
    return Response(
        content=export_csv(store.cards),
        media_type="text/csv",
        status_code=status.HTTP_200_OK,
        headers={"Content-Disposition": 'attachment; filename="duelvault-collection.csv"'},
    )
