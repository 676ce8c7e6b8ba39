"""
Artwork preferences.

Remembers the artwork last chosen for each set code so the next scan of
the same print defaults to it.
"""

from collections.abc import Mapping, Sequence

from duelvault.models.card import ArtworkInfo


def get_artwork_preference(prefs: Mapping[str, int], collection_code: str) -> int | None:
    """Preferred artwork id for a set code, or None."""
    if not collection_code:
        return None
    return prefs.get(collection_code) or None


def save_artwork_preference(
    prefs: Mapping[str, int], collection_code: str, artwork_id: int
) -> dict[str, int]:
    """Return new preferences with the choice recorded. Empty codes are ignored."""
    updated = dict(prefs)
    if collection_code:
        updated[collection_code] = artwork_id
    return updated


def default_artwork(
    artworks: Sequence[ArtworkInfo],
    prefs: Mapping[str, int],
    collection_code: str,
) -> ArtworkInfo | None:
    """
    Pick the artwork to preselect for a scan.

    The remembered artwork wins when it is still offered; otherwise the
    first artwork. None when there are no artworks at all.
    """
    if not artworks:
        return None
    preferred = get_artwork_preference(prefs, collection_code)
    if preferred is not None:
        for artwork in artworks:
            if artwork.id == preferred:
                return artwork
    return artworks[0]
