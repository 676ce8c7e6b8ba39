from collections.abc import Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from duelvault.db.database import get_session
from duelvault.main import app
from duelvault.models.card import CardRecord
from duelvault.models.db import Base


@pytest.fixture
def make_card() -> Callable[..., CardRecord]:
    """Factory for canonical CardRecords with sensible defaults."""

    def _make(
        card_id: str = "LOB-EN001-Ultra Rare-89631139",
        name: str = "Blue-Eyes White Dragon",
        quantity: int = 1,
        display_type: str = "Normal Monster",
        type_tags: tuple[str, ...] = ("Dragon", "Normal", "Non-Effect"),
        **overrides: Any,
    ) -> CardRecord:
        # ids are "<collection code>-<rarity>-<artwork id>"
        parts = card_id.rsplit("-", 2)
        collection_code, rarity = (parts[0], parts[1]) if len(parts) == 3 else (card_id, "Common")
        fields: dict[str, Any] = {
            "id": card_id,
            "card_code": "89631139",
            "name": name,
            "display_type": display_type,
            "type_tags": type_tags,
            "collection_code": collection_code,
            "rarity": rarity,
            "quantity": quantity,
            "date_added": 1_700_000_000_000,
        }
        fields.update(overrides)
        return CardRecord(**fields)

    return _make


@pytest.fixture
def legacy_collection() -> list[dict[str, Any]]:
    """Collection as written by earlier versions (race/subType, no tags)."""
    return [
        {
            "id": "LOB-EN001-Ultra Rare-89631139",
            "cardCode": "89631139",
            "name": "Blue-Eyes White Dragon",
            "type": "Normal Monster",
            "race": "Dragon",
            "attribute": "LIGHT",
            "level": 8,
            "atk": 3000,
            "def": 2500,
            "description": "This legendary dragon is a powerful engine of destruction.",
            "imageUrl": "https://images.ygoprodeck.com/images/cards/89631139.jpg",
            "collectionCode": "LOB-EN001",
            "rarity": "Ultra Rare",
            "quantity": 3,
        },
        {
            "id": "CT13-EN003-Ultra Rare-44508094",
            "cardCode": "44508094",
            "name": "Stardust Dragon",
            "type": "Synchro Effect Monster",
            "race": "Dragon",
            "attribute": "WIND",
            "level": 8,
            "atk": 2500,
            "def": 2000,
            "imageUrl": "https://images.ygoprodeck.com/images/cards/44508094.jpg",
            "collectionCode": "CT13-EN003",
            "rarity": "Ultra Rare",
            "quantity": "2",
            "dateAdded": 1_650_000_000_000,
        },
        {
            "id": "SDY-046-Common-83764718",
            "cardCode": "83764718",
            "name": "Monster Reborn",
            "type": "Spell Card",
            "race": "Normal",
            "collectionCode": "SDY-046",
            "rarity": "Common",
        },
    ]


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(async_engine):
    """Provide an async test client with overridden database session."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
