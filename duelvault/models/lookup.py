"""
Card lookup payloads.

Shapes of the raw card database response (YGOPRODeck `cardinfo`). These are
UNTRUSTED inputs; `services.card_lookup` normalizes them into canonical
card data.
"""

from pydantic import BaseModel, ConfigDict, Field


class ApiCardImage(BaseModel):
    id: int
    image_url: str
    image_url_small: str | None = None


class ApiCardSet(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    set_name: str
    set_code: str
    set_rarity: str = "Common"
    set_rarity_code: str | None = None
    release_date: str | None = Field(default=None, alias="releaseDate")


class CardLookupResult(BaseModel):
    """One card entry from the card database."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    name: str
    name_pt: str | None = None
    type: str = ""
    frame_type: str | None = Field(default=None, alias="frameType")
    typeline: list[str] | None = None
    race: str | None = None
    attribute: str | None = None
    level: int | None = None
    atk: int | None = None
    def_: int | None = Field(default=None, alias="def")
    desc: str | None = None
    desc_pt: str | None = None
    card_images: list[ApiCardImage] = Field(default_factory=list)
    card_sets: list[ApiCardSet] | None = None
