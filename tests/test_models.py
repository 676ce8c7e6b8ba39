import pytest

from duelvault.models.card import CardRecord
from duelvault.models.deck import Deck, DeckSection
from duelvault.models.library import CollectionStore
from duelvault.models.lookup import CardLookupResult
from duelvault.models.rarity import normalize_rarity, rarity_rank


class TestCardRecord:
    def test_card_immutable(self, make_card) -> None:
        card = make_card()
        with pytest.raises(AttributeError):
            card.quantity = 3  # type: ignore[misc]

    def test_to_dict_uses_persisted_keys(self, make_card) -> None:
        data = make_card(atk=3000, def_=2500).to_dict()

        assert data["type"] == "Normal Monster"
        assert data["typeTags"] == ["Dragon", "Normal", "Non-Effect"]
        assert data["def"] == 2500
        assert data["collectionCode"] == "LOB-EN001"
        assert data["dateAdded"] == 1_700_000_000_000

    def test_from_dict_round_trip(self, make_card) -> None:
        card = make_card(name_pt="Dragão Branco de Olhos Azuis", level=8)

        assert CardRecord.from_dict(card.to_dict()) == card

    def test_has_tag(self, make_card) -> None:
        card = make_card()

        assert card.has_tag("Dragon")
        assert not card.has_tag("Effect")


class TestDeck:
    def test_sections_and_copies(self) -> None:
        deck = Deck(id="d1", name="D", main_deck=("a", "b"), extra_deck=("c",), side_deck=("a",))

        assert deck.section(DeckSection.EXTRA) == ("c",)
        assert deck.all_card_ids() == ("a", "b", "c", "a")
        assert deck.copies_of("a") == 2

    def test_json_keys(self) -> None:
        assert DeckSection.MAIN.json_key == "mainDeck"
        assert DeckSection.SIDE.json_key == "sideDeck"

    def test_dict_round_trip(self) -> None:
        deck = Deck(id="d1", name="D", main_deck=("a",), date_created=1, date_updated=2)

        assert Deck.from_dict(deck.to_dict()) == deck


class TestCollectionStore:
    def test_empty_store(self) -> None:
        store = CollectionStore()

        assert store.total_copies() == 0
        assert store.print_count() == 0
        assert store.to_dict() == {"cards": [], "decks": [], "artworkPrefs": {}}

    def test_counts(self, make_card) -> None:
        store = CollectionStore(
            cards=(
                make_card("LOB-EN001-Ultra Rare-1", quantity=2),
                make_card("SDK-001-Ultra Rare-1", quantity=1),
                make_card("SDY-006-Ultra Rare-2", name="Dark Magician", quantity=3),
            )
        )

        assert store.total_copies() == 6
        assert store.print_count() == 3

    def test_lookups(self, make_card) -> None:
        card = make_card()
        deck = Deck(id="d1", name="D", main_deck=(card.id, card.id))
        store = CollectionStore(cards=(card,), decks=(deck,))

        assert store.get_card(card.id) is card
        assert store.get_card("missing") is None
        assert store.get_deck("d1") is deck

    def test_with_methods_return_new_store(self, make_card) -> None:
        store = CollectionStore()

        updated = store.with_cards([make_card()]).with_artwork_prefs({"LOB-EN001": 1})

        assert store.print_count() == 0
        assert updated.print_count() == 1
        assert updated.artwork_prefs == {"LOB-EN001": 1}


class TestRarity:
    def test_normalize(self) -> None:
        assert normalize_rarity(" Secret Rare ") == "Secret Rare"
        assert normalize_rarity("Mythic") == "Other"
        assert normalize_rarity(None) == "Other"

    def test_rank_orders_common_first(self) -> None:
        assert rarity_rank("Common") < rarity_rank("Ultra Rare") < rarity_rank("Other")
        assert rarity_rank("unknown") > rarity_rank("Other")


class TestCardLookupResult:
    def test_aliases(self) -> None:
        lookup = CardLookupResult.model_validate(
            {"name": "Kuriboh", "frameType": "effect", "def": 200, "card_images": []}
        )

        assert lookup.frame_type == "effect"
        assert lookup.def_ == 200
        assert lookup.card_sets is None
