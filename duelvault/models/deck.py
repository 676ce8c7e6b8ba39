"""Decks and their three card sections."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DeckSection(str, Enum):
    """The three card lists of a deck."""

    MAIN = "main"
    EXTRA = "extra"
    SIDE = "side"

    @property
    def json_key(self) -> str:
        return f"{self.value}Deck"


@dataclass(frozen=True, slots=True)
class Deck:
    """
    A user deck.

    Sections hold CardRecord ids in insertion order; duplicates represent
    multiple physical copies. Ids are weak references: an id missing from
    the collection counts as zero and renders nothing.

    Attributes:
        id: Deck identifier
        name: Display name
        main_deck: Main deck card ids
        extra_deck: Extra deck card ids (Fusion / Synchro / Xyz / Link)
        side_deck: Side deck card ids
        date_created: Creation timestamp (epoch ms)
        date_updated: Last save timestamp (epoch ms)
    """

    id: str
    name: str
    main_deck: tuple[str, ...] = field(default_factory=tuple)
    extra_deck: tuple[str, ...] = field(default_factory=tuple)
    side_deck: tuple[str, ...] = field(default_factory=tuple)
    date_created: int = 0
    date_updated: int = 0

    def section(self, section: DeckSection) -> tuple[str, ...]:
        if section is DeckSection.MAIN:
            return self.main_deck
        if section is DeckSection.EXTRA:
            return self.extra_deck
        return self.side_deck

    def all_card_ids(self) -> tuple[str, ...]:
        """Every card slot across main, extra and side."""
        return self.main_deck + self.extra_deck + self.side_deck

    def copies_of(self, card_id: str) -> int:
        """Occurrences of a card id across all three sections."""
        return self.all_card_ids().count(card_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mainDeck": list(self.main_deck),
            "extraDeck": list(self.extra_deck),
            "sideDeck": list(self.side_deck),
            "dateCreated": self.date_created,
            "dateUpdated": self.date_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Deck":
        """Rebuild a deck from canonical JSON (see the migrator for legacy data)."""
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            main_deck=tuple(data.get("mainDeck") or ()),
            extra_deck=tuple(data.get("extraDeck") or ()),
            side_deck=tuple(data.get("sideDeck") or ()),
            date_created=int(data.get("dateCreated") or 0),
            date_updated=int(data.get("dateUpdated") or 0),
        )
