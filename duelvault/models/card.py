"""
Card models.

CardRecord is the canonical, owned print of a card. Persisted JSON uses the
historical camelCase keys; attributes are snake_case.

INVARIANTS:
- id == f"{collection_code}-{rarity}-{artwork_id}" for records created here
- quantity >= 0
- type_tags is de-duplicated
- All models are frozen; mutations produce new instances
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ArtworkInfo:
    """One artwork variant of a card."""

    id: int
    image_url: str
    small_image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "imageUrl": self.image_url, "smallImageUrl": self.small_image_url}


@dataclass(frozen=True, slots=True)
class CardSetInfo:
    """A print listing of a card in a set."""

    name: str
    code: str
    rarity: str
    release_date: str | None = None


@dataclass(frozen=True, slots=True)
class IdentifiedCard:
    """
    Card metadata resolved from a lookup, before it becomes an owned print.

    Carries everything a CardRecord needs except identity, quantity,
    artwork URL and the date it was added.
    """

    card_code: str
    name: str
    display_type: str
    type_tags: tuple[str, ...] = ()
    name_pt: str | None = None
    attribute: str | None = None
    level: int | None = None
    atk: int | None = None
    def_: int | None = None
    description: str | None = None
    description_pt: str | None = None
    collection_code: str = ""
    collection_name: str | None = None
    release_date: str | None = None
    rarity: str = "Common"


@dataclass(frozen=True, slots=True)
class CardRecord:
    """
    A single owned print of a card.

    Attributes:
        id: Composite identity (collection code, rarity, artwork id)
        card_code: Game-intrinsic card identifier, stable across prints
        display_type: Canonical type string, free of "Tuner"/"Effect"
        type_tags: Races, mechanical subtypes and exactly one of
            Effect / Non-Effect for monsters
        quantity: Total owned copies of this exact print
        date_added: Creation timestamp in epoch milliseconds
    """

    id: str
    card_code: str
    name: str
    display_type: str
    type_tags: tuple[str, ...] = field(default_factory=tuple)
    name_pt: str | None = None
    attribute: str | None = None
    level: int | None = None
    atk: int | None = None
    def_: int | None = None
    description: str | None = None
    description_pt: str | None = None
    image_url: str = ""
    collection_code: str = ""
    collection_name: str | None = None
    release_date: str | None = None
    rarity: str = "Common"
    quantity: int = 0
    date_added: int = 0

    def has_tag(self, tag: str) -> bool:
        return tag in self.type_tags

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return {
            "id": self.id,
            "cardCode": self.card_code,
            "name": self.name,
            "name_pt": self.name_pt,
            "type": self.display_type,
            "typeTags": list(self.type_tags),
            "attribute": self.attribute,
            "level": self.level,
            "atk": self.atk,
            "def": self.def_,
            "description": self.description,
            "description_pt": self.description_pt,
            "imageUrl": self.image_url,
            "collectionCode": self.collection_code,
            "collectionName": self.collection_name,
            "releaseDate": self.release_date,
            "rarity": self.rarity,
            "quantity": self.quantity,
            "dateAdded": self.date_added,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CardRecord":
        """
        Rebuild a record from its persisted JSON shape.

        Expects canonical data (as written by `to_dict`). Legacy or loosely
        shaped data must go through the collection migrator instead.
        """
        return cls(
            id=data["id"],
            card_code=data.get("cardCode") or "",
            name=data.get("name") or "",
            name_pt=data.get("name_pt"),
            display_type=data.get("type") or "",
            type_tags=tuple(data.get("typeTags") or ()),
            attribute=data.get("attribute"),
            level=data.get("level"),
            atk=data.get("atk"),
            def_=data.get("def"),
            description=data.get("description"),
            description_pt=data.get("description_pt"),
            image_url=data.get("imageUrl") or "",
            collection_code=data.get("collectionCode") or "",
            collection_name=data.get("collectionName"),
            release_date=data.get("releaseDate"),
            rarity=data.get("rarity") or "Common",
            quantity=int(data.get("quantity") or 0),
            date_added=int(data.get("dateAdded") or 0),
        )
