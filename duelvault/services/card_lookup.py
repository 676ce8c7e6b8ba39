"""
Card lookup normalization.

Turns a raw card database entry (plus the user's scanned set code) into
canonical card metadata, the list of available artworks and the chosen
print. Fetching is done elsewhere; everything here is pure.

A scanned set code that does not match any listed print is NOT an error:
`print_was_found` is False and the scanned code is kept so the user can
confirm it.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from duelvault.models.card import ArtworkInfo, CardSetInfo, IdentifiedCard
from duelvault.models.lookup import CardLookupResult
from duelvault.models.rarity import normalize_rarity
from duelvault.services.type_classifier import classify_type

logger = logging.getLogger(__name__)

CARD_CODE_LENGTH = 8
UNKNOWN_SET_CODE = "N/A"
UNKNOWN_SET_NAME = "Unknown Set"
DEFAULT_RARITY = "Common"


@dataclass(frozen=True, slots=True)
class LookupOutcome:
    """
    Normalized result of identifying a card.

    Attributes:
        card: Canonical card metadata for the chosen print
        artworks: Every known artwork, primary artworks first
        print_was_found: True when the scanned set code matched a listed print
        sets: All prints listed by the card database
    """

    card: IdentifiedCard
    artworks: tuple[ArtworkInfo, ...]
    print_was_found: bool
    sets: tuple[CardSetInfo, ...] = ()


def pad_card_code(card_id: int | str | None) -> str:
    """Card database ids are shown as 8-digit, zero-padded codes."""
    if card_id is None:
        return ""
    return str(card_id).strip().zfill(CARD_CODE_LENGTH)


def collect_artworks(
    primary: CardLookupResult,
    variants: Iterable[CardLookupResult] = (),
) -> tuple[ArtworkInfo, ...]:
    """
    Gather unique artworks for a card.

    The primary entry's artworks come first; alternate entries sharing the
    card's exact name contribute the rest. Duplicates by artwork id are
    dropped.
    """
    seen: dict[int, ArtworkInfo] = {}
    sources = [primary, *(v for v in variants if v.name == primary.name)]
    for entry in sources:
        for image in entry.card_images:
            if image.id not in seen:
                seen[image.id] = ArtworkInfo(
                    id=image.id,
                    image_url=image.image_url,
                    small_image_url=image.image_url_small,
                )
    return tuple(seen.values())


def _primary_race(race: str | None) -> str | None:
    # "Warrior / Link" style races keep the first part only
    if not race:
        return None
    return race.split("/")[0].strip() or None


def identify_card(
    lookup: CardLookupResult,
    collection_code: str | None = None,
    lookup_pt: CardLookupResult | None = None,
    variants: Iterable[CardLookupResult] = (),
) -> LookupOutcome:
    """
    Normalize a card database entry into canonical card data.

    Print selection: the print whose set code matches `collection_code`
    (case-insensitive); otherwise the first listed print; otherwise a
    placeholder print using the scanned code (or "N/A") and Common rarity.
    When the scanned code matched nothing, it is still used as the
    collection code.

    Args:
        lookup: Primary card database entry
        collection_code: Set code read from the physical card, if any
        lookup_pt: Portuguese entry for the same card, if available
        variants: Other entries sharing the card's name (extra artworks)

    Returns:
        LookupOutcome with the card, artworks and print selection.
    """
    scanned = (collection_code or "").strip() or None
    sets = tuple(
        CardSetInfo(
            name=s.set_name,
            code=s.set_code,
            rarity=normalize_rarity(s.set_rarity),
            release_date=s.release_date,
        )
        for s in lookup.card_sets or ()
    )

    chosen: CardSetInfo | None = None
    if scanned:
        chosen = next((s for s in sets if s.code.upper() == scanned.upper()), None)
    print_was_found = chosen is not None

    if chosen is None and sets:
        chosen = sets[0]
    if chosen is None:
        chosen = CardSetInfo(
            name=UNKNOWN_SET_NAME,
            code=scanned or UNKNOWN_SET_CODE,
            rarity=DEFAULT_RARITY,
        )
        print_was_found = False

    code = chosen.code
    name = chosen.name
    release_date = chosen.release_date
    if not print_was_found and scanned:
        code = scanned
        name = None
        release_date = None

    classification = classify_type(
        lookup.type,
        race=_primary_race(lookup.race),
        frame_type=lookup.frame_type,
        typeline=lookup.typeline,
    )

    card = IdentifiedCard(
        card_code=pad_card_code(lookup.id),
        name=lookup.name,
        name_pt=(lookup_pt.name if lookup_pt else None) or lookup.name_pt,
        display_type=classification.display_type,
        type_tags=classification.type_tags,
        attribute=lookup.attribute or None,
        level=lookup.level or None,
        atk=lookup.atk,
        def_=lookup.def_,
        description=lookup.desc,
        description_pt=(lookup_pt.desc if lookup_pt else None) or lookup.desc_pt,
        collection_code=code,
        collection_name=name if name != UNKNOWN_SET_NAME else None,
        release_date=release_date,
        rarity=chosen.rarity,
    )

    if scanned and not print_was_found:
        logger.info(
            "print_not_found",
            extra={"card_code": card.card_code, "scanned_code": scanned, "listed": len(sets)},
        )

    return LookupOutcome(
        card=card,
        artworks=collect_artworks(lookup, variants),
        print_was_found=print_was_found,
        sets=sets,
    )
