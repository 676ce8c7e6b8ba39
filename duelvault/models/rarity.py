"""Card rarity enumeration."""

# Order matters: it is the rarity sort order used by collection views.
RARITIES: tuple[str, ...] = (
    "Common",
    "Rare",
    "Super Rare",
    "Ultra Rare",
    "Secret Rare",
    "Ultimate Rare",
    "Ghost Rare",
    "Gold Rare",
    "Prismatic Secret Rare",
    "Collector's Rare",
    "Quarter Century Secret Rare",
    "Starfoil Rare",
    "Mosaic Rare",
    "Shatterfoil Rare",
    "Short Print",
    "Parallel Rare",
    "Other",
)

FALLBACK_RARITY = "Other"

_RARITY_ORDER = {rarity: index for index, rarity in enumerate(RARITIES)}


def normalize_rarity(rarity: object) -> str:
    """Map a raw rarity string onto the enumeration, falling back to "Other"."""
    if not isinstance(rarity, str):
        return FALLBACK_RARITY
    cleaned = rarity.strip()
    return cleaned if cleaned in _RARITY_ORDER else FALLBACK_RARITY


def rarity_rank(rarity: str) -> int:
    """Sort key for a rarity. Unknown rarities sort last."""
    return _RARITY_ORDER.get(rarity, 99)
