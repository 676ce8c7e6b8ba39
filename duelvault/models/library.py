"""
The user's library: collection, decks and artwork preferences.

CollectionStore is the explicit state value every core operation works
against. It is never mutated; operations return a new store. Persistence
writes the whole store (last writer wins).
"""

from dataclasses import dataclass, field, replace
from typing import Any

from duelvault.models.card import CardRecord
from duelvault.models.deck import Deck


@dataclass(frozen=True)
class CollectionStore:
    """
    Snapshot of one user's library.

    Attributes:
        cards: Owned prints (the collection owns these exclusively)
        decks: User decks holding weak references to card ids
        artwork_prefs: collection code -> preferred artwork id
    """

    cards: tuple[CardRecord, ...] = field(default_factory=tuple)
    decks: tuple[Deck, ...] = field(default_factory=tuple)
    artwork_prefs: dict[str, int] = field(default_factory=dict)

    def get_card(self, card_id: str) -> CardRecord | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def get_deck(self, deck_id: str) -> Deck | None:
        for deck in self.decks:
            if deck.id == deck_id:
                return deck
        return None

    def card_map(self) -> dict[str, CardRecord]:
        return {card.id: card for card in self.cards}

    def total_copies(self) -> int:
        """Total copies across all prints."""
        return sum(card.quantity for card in self.cards)

    def print_count(self) -> int:
        """Number of distinct prints (records)."""
        return len(self.cards)

    def with_cards(self, cards: "list[CardRecord] | tuple[CardRecord, ...]") -> "CollectionStore":
        return replace(self, cards=tuple(cards))

    def with_decks(self, decks: "list[Deck] | tuple[Deck, ...]") -> "CollectionStore":
        return replace(self, decks=tuple(decks))

    def with_artwork_prefs(self, prefs: dict[str, int]) -> "CollectionStore":
        return replace(self, artwork_prefs=dict(prefs))

    def to_dict(self) -> dict[str, Any]:
        """Serialized whole-state payload for the persistence sink."""
        return {
            "cards": [card.to_dict() for card in self.cards],
            "decks": [deck.to_dict() for deck in self.decks],
            "artworkPrefs": dict(self.artwork_prefs),
        }
