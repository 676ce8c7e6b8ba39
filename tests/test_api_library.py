"""Tests for library API endpoints."""

from typing import Any

import pytest
from httpx import AsyncClient

USER = "user-123"
DM_SDY = "SDY-006-Ultra Rare-46986414"


@pytest.fixture
def dark_magician_lookup() -> dict[str, Any]:
    return {
        "id": 46986414,
        "name": "Dark Magician",
        "type": "Normal Monster",
        "frameType": "normal",
        "race": "Spellcaster",
        "attribute": "DARK",
        "level": 7,
        "atk": 2500,
        "def": 2100,
        "desc": "The ultimate wizard in terms of attack and defense.",
        "card_images": [
            {"id": 46986414, "image_url": "https://img/46986414.jpg"},
            {"id": 36996508, "image_url": "https://img/36996508.jpg"},
        ],
        "card_sets": [
            {"set_name": "Starter Deck: Yugi", "set_code": "SDY-006", "set_rarity": "Ultra Rare"},
        ],
    }


async def _add(client: AsyncClient, lookup: dict[str, Any], **fields: Any):
    return await client.post(f"/library/{USER}/cards", json={"lookup": lookup, **fields})


class TestGetLibrary:
    async def test_new_user_gets_empty_library(self, client: AsyncClient) -> None:
        response = await client.get(f"/library/{USER}")

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == USER
        assert data["cards"] == []
        assert data["decks"] == []
        assert data["stats"]["total_cards"] == 0

    async def test_unknown_sort_is_422(self, client: AsyncClient) -> None:
        response = await client.get(f"/library/{USER}", params={"sort": "power-asc"})

        assert response.status_code == 422
        assert response.json()["failure"]["kind"] == "invalid_input"


class TestLibrarySearch:
    @pytest.fixture
    async def imported(self, client: AsyncClient, legacy_collection: list[dict[str, Any]]) -> None:
        legacy_collection[0]["releaseDate"] = "2002-03-08"
        response = await client.post(f"/library/{USER}/import", json=legacy_collection)
        assert response.status_code == 200

    async def _names(self, client: AsyncClient, **params: Any) -> list[str]:
        response = await client.get(f"/library/{USER}", params=params)
        assert response.status_code == 200
        return sorted(card["name"] for card in response.json()["cards"])

    async def test_no_filters_lists_everything(self, client: AsyncClient, imported: None) -> None:
        assert len(await self._names(client)) == 3

    async def test_filter_by_tags(self, client: AsyncClient, imported: None) -> None:
        assert await self._names(client, tag=["Dragon", "Synchro"]) == ["Stardust Dragon"]

    async def test_filter_by_text_and_type(self, client: AsyncClient, imported: None) -> None:
        assert await self._names(client, q="DESTRUCTION") == ["Blue-Eyes White Dragon"]
        assert await self._names(client, main_type="Spell") == ["Monster Reborn"]

    async def test_filter_by_monster_stats(self, client: AsyncClient, imported: None) -> None:
        names = await self._names(client, attribute="LIGHT", level=8)

        assert names == ["Blue-Eyes White Dragon"]

    async def test_filter_by_release_date(self, client: AsyncClient, imported: None) -> None:
        names = await self._names(client, released_before="2005-01-01")

        assert names == ["Blue-Eyes White Dragon"]

    async def test_stats_cover_whole_collection(self, client: AsyncClient, imported: None) -> None:
        response = await client.get(f"/library/{USER}", params={"collection_code": "sdy"})

        data = response.json()
        assert [card["name"] for card in data["cards"]] == ["Monster Reborn"]
        assert data["stats"]["total_cards"] == 6
        assert len(data["availability"]) == 3


class TestAddCard:
    async def test_add_scanned_card(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        response = await _add(client, dark_magician_lookup, collection_code="SDY-006", quantity=2)

        assert response.status_code == 200
        data = response.json()
        assert data["card"]["id"] == DM_SDY
        assert data["card"]["quantity"] == 2
        assert data["card"]["typeTags"] == ["Spellcaster", "Normal", "Non-Effect"]
        assert data["print_was_found"] is True
        assert data["available"] == 2
        assert data["total_cards"] == 2

    async def test_scans_merge_into_one_print(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        await _add(client, dark_magician_lookup, collection_code="SDY-006", quantity=2)
        await _add(client, dark_magician_lookup, collection_code="SDY-006")

        library = (await client.get(f"/library/{USER}")).json()

        assert len(library["cards"]) == 1
        assert library["cards"][0]["quantity"] == 3

    async def test_unknown_set_code_kept(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        response = await _add(client, dark_magician_lookup, collection_code="DUPO-EN001")

        data = response.json()
        assert data["print_was_found"] is False
        assert data["card"]["collectionCode"] == "DUPO-EN001"

    async def test_artwork_choice_is_remembered(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        first = await _add(client, dark_magician_lookup, collection_code="SDY-006", artwork_id=36996508)
        second = await _add(client, dark_magician_lookup, collection_code="SDY-006")

        assert first.json()["card"]["id"] == "SDY-006-Ultra Rare-36996508"
        assert second.json()["card"]["id"] == "SDY-006-Ultra Rare-36996508"
        assert second.json()["card"]["quantity"] == 2

    async def test_unknown_artwork_is_404(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        response = await _add(client, dark_magician_lookup, artwork_id=1)

        assert response.status_code == 404
        assert response.json()["outcome"] == "known_failure"

    async def test_no_artworks_is_422(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        dark_magician_lookup["card_images"] = []

        response = await _add(client, dark_magician_lookup)

        assert response.status_code == 422

    async def test_zero_quantity_rejected(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        response = await _add(client, dark_magician_lookup, quantity=0)

        assert response.status_code == 422

    async def test_release_date_from_matched_print(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        dark_magician_lookup["card_sets"][0]["releaseDate"] = "2002-03-08"

        response = await _add(client, dark_magician_lookup, collection_code="SDY-006")

        assert response.json()["card"]["releaseDate"] == "2002-03-08"
        assert response.json()["card"]["collectionName"] == "Starter Deck: Yugi"

    async def test_confirmed_set_details_fill_missing_ones(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        await _add(client, dark_magician_lookup, collection_code="DUPO-EN001")

        response = await _add(
            client,
            dark_magician_lookup,
            collection_code="DUPO-EN001",
            collection_name="Duel Power",
            release_date="2019-10-11",
        )

        card = response.json()["card"]
        assert card["quantity"] == 2
        assert card["collectionName"] == "Duel Power"
        assert card["releaseDate"] == "2019-10-11"


class TestQuantityAndArtwork:
    async def test_shrink_below_deck_usage_refused(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        await _add(client, dark_magician_lookup, collection_code="SDY-006", quantity=3)
        deck = (await client.post(f"/library/{USER}/decks", json={"name": "Spellcasters"})).json()
        deck_id = deck["deck"]["id"]
        for _ in range(2):
            await client.post(f"/library/{USER}/decks/{deck_id}/cards", json={"card_id": DM_SDY})

        refused = await client.patch(
            f"/library/{USER}/cards/{DM_SDY}/quantity", json={"quantity": 1}
        )
        accepted = await client.patch(
            f"/library/{USER}/cards/{DM_SDY}/quantity", json={"quantity": 2}
        )

        assert refused.status_code == 409
        body = refused.json()
        assert body["outcome"] == "refusal"
        assert body["failure"]["kind"] == "in_use"
        assert accepted.status_code == 200
        assert accepted.json()["cards"][0]["quantity"] == 2
        assert accepted.json()["availability"] == {DM_SDY: 0}

    async def test_zero_removes_card(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        await _add(client, dark_magician_lookup, collection_code="SDY-006")

        response = await client.patch(
            f"/library/{USER}/cards/{DM_SDY}/quantity", json={"quantity": 0}
        )

        assert response.status_code == 200
        assert response.json()["cards"] == []

    async def test_unknown_card_is_404(self, client: AsyncClient) -> None:
        response = await client.patch(
            f"/library/{USER}/cards/missing/quantity", json={"quantity": 1}
        )

        assert response.status_code == 404

    async def test_change_artwork_rewrites_decks(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        await _add(client, dark_magician_lookup, collection_code="SDY-006")
        deck_id = (await client.post(f"/library/{USER}/decks", json={})).json()["deck"]["id"]
        await client.post(f"/library/{USER}/decks/{deck_id}/cards", json={"card_id": DM_SDY})

        response = await client.put(
            f"/library/{USER}/cards/{DM_SDY}/artwork",
            json={"artwork_id": 36996508, "image_url": "https://img/36996508.jpg"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "old_id": DM_SDY,
            "new_id": "SDY-006-Ultra Rare-36996508",
            "merged": False,
        }
        deck = (await client.get(f"/library/{USER}/decks/{deck_id}")).json()
        assert deck["deck"]["mainDeck"] == ["SDY-006-Ultra Rare-36996508"]
        assert deck["missing_cards"] == []

    async def test_change_artwork_unknown_card(self, client: AsyncClient) -> None:
        response = await client.put(
            f"/library/{USER}/cards/missing/artwork",
            json={"artwork_id": 1, "image_url": "x"},
        )

        assert response.status_code == 404


class TestBackupEndpoints:
    async def test_export_then_import(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        await _add(client, dark_magician_lookup, collection_code="SDY-006", quantity=2)

        export = await client.get(f"/library/{USER}/export")
        assert export.status_code == 200
        assert "duelvault-backup-" in export.headers["content-disposition"]
        backup = export.json()
        assert backup["artworkPrefs"] == {"SDY-006": 46986414}

        restored = await client.post("/library/other-user/import", json=backup)

        assert restored.status_code == 200
        assert restored.json()["cards"] == backup["collection"]

    async def test_import_legacy_array(
        self, client: AsyncClient, legacy_collection: list[dict[str, Any]]
    ) -> None:
        response = await client.post(f"/library/{USER}/import", json=legacy_collection)

        assert response.status_code == 200
        data = response.json()
        assert len(data["cards"]) == 3
        assert data["stats"]["total_cards"] == 6

    async def test_import_invalid_payload(self, client: AsyncClient) -> None:
        response = await client.post(f"/library/{USER}/import", json={"foo": "bar"})

        assert response.status_code == 422
        assert response.json()["failure"]["kind"] == "invalid_input"

    async def test_export_csv(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        await _add(client, dark_magician_lookup, collection_code="SDY-006")

        response = await client.get(f"/library/{USER}/export.csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.splitlines()
        assert lines[0].startswith("id,cardCode,name")
        assert lines[1].startswith(DM_SDY)


class TestDeleteLibrary:
    async def test_delete(
        self, client: AsyncClient, dark_magician_lookup: dict[str, Any]
    ) -> None:
        await _add(client, dark_magician_lookup)

        first = await client.delete(f"/library/{USER}")
        second = await client.delete(f"/library/{USER}")

        assert first.json()["deleted"] is True
        assert second.json()["deleted"] is False
