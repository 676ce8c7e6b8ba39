"""
Card type classification.

Normalizes a raw type string (plus optional legacy race/subType fields and
the card database's frame type / typeline) into a canonical display type
and a tag list.

This is the ONLY place mechanical subtype membership is decided. Other
components query `type_tags`; they never re-parse raw type strings.

INVARIANTS:
- Monster cards carry exactly one of "Effect" / "Non-Effect"
- A normal-frame signal (frame type or "Normal" in the type string) is
  authoritative: the card is Non-Effect even if other signals disagree
- The display type never contains "Tuner" or "Effect"
- Classification is a fixed point: classifying an already canonical
  card yields the same result
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

EFFECT_TAG = "Effect"
NON_EFFECT_TAG = "Non-Effect"
NORMAL_TAG = "Normal"

# Substring keywords checked against the raw type string
MECHANICAL_KEYWORDS: tuple[str, ...] = (
    "Synchro",
    "Tuner",
    "Fusion",
    "Xyz",
    "Link",
    "Ritual",
    "Pendulum",
    "Toon",
    "Spirit",
    "Gemini",
    "Union",
    "Normal",
    "Flip",
)

# The card database spells it "XYZ Monster"
_KEYWORD_ALIASES: dict[str, str] = {"XYZ": "Xyz"}

# Subtypes that are always effect monsters
EFFECT_IMPLYING_TAGS: frozenset[str] = frozenset({"Toon", "Spirit", "Gemini", "Union", "Flip"})

# Monsters of these kinds live in the extra deck
EXTRA_DECK_TAGS: frozenset[str] = frozenset({"Fusion", "Synchro", "Xyz", "Link"})

NORMAL_FRAMES: frozenset[str] = frozenset({"normal", "normal_pendulum"})
EFFECT_FRAMES: frozenset[str] = frozenset({"effect", "effect_pendulum"})
NON_MONSTER_FRAMES: frozenset[str] = frozenset({"spell", "trap", "skill", "token"})

# (predicate tags, display type); first match wins
_DISPLAY_PRIORITY: tuple[tuple[tuple[str, ...], str], ...] = (
    (("Link",), "Link Monster"),
    (("Pendulum", "Normal"), "Pendulum Normal Monster"),
    (("Pendulum",), "Pendulum Monster"),
    (("Xyz",), "XYZ Monster"),
    (("Synchro",), "Synchro Monster"),
    (("Fusion",), "Fusion Monster"),
    (("Ritual",), "Ritual Monster"),
    (("Toon",), "Toon Monster"),
    (("Gemini",), "Gemini Monster"),
    (("Spirit",), "Spirit Monster"),
    (("Union",), "Union Monster"),
    (("Normal",), "Normal Monster"),
)

_STRIPPED_WORDS = re.compile(r"Tuner|Effect")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class TypeClassification:
    """Canonical type information for a card."""

    display_type: str
    type_tags: tuple[str, ...]

    @property
    def is_monster(self) -> bool:
        return is_monster_tags(self.type_tags)


def _add(tags: list[str], tag: str) -> None:
    if tag and tag not in tags:
        tags.append(tag)


def _is_monster(type_string: str, frame_type: str | None, typeline: Sequence[str] | None) -> bool:
    if frame_type:
        return frame_type.lower() not in NON_MONSTER_FRAMES
    if typeline:
        return True
    return "Monster" in type_string


def _resolve_effect(
    tags: list[str],
    type_string: str,
    frame_type: str | None,
    typeline: Sequence[str] | None,
    had_effect_tag: bool,
    had_non_effect_tag: bool,
) -> list[str]:
    """Apply the Effect / Non-Effect decision and return the cleaned tags."""
    frame = (frame_type or "").lower()
    normal_signal = frame in NORMAL_FRAMES or NORMAL_TAG in type_string

    if normal_signal:
        if EFFECT_TAG in tags:
            logger.warning(
                "type_tag_conflict",
                extra={
                    "type_string": type_string,
                    "frame_type": frame_type,
                    "dropped_tag": EFFECT_TAG,
                },
            )
        cleaned = [t for t in tags if t != EFFECT_TAG]
        _add(cleaned, NORMAL_TAG)
        _add(cleaned, NON_EFFECT_TAG)
        return cleaned

    effect_signal = (
        frame in EFFECT_FRAMES
        or any(EFFECT_TAG in line for line in (typeline or ()))
        or EFFECT_TAG in type_string
        or any(tag in EFFECT_IMPLYING_TAGS for tag in tags)
    )
    if not effect_signal and had_effect_tag and not had_non_effect_tag:
        # Already canonical; the display type no longer says "Effect"
        effect_signal = True

    keep = EFFECT_TAG if effect_signal else NON_EFFECT_TAG
    drop = NON_EFFECT_TAG if effect_signal else EFFECT_TAG
    cleaned = [t for t in tags if t != drop]
    _add(cleaned, keep)
    return cleaned


def _display_type(type_string: str, tags: Sequence[str], is_monster: bool) -> str:
    display = type_string
    if is_monster and "Spell" not in type_string and "Trap" not in type_string:
        for required, candidate in _DISPLAY_PRIORITY:
            if all(tag in tags for tag in required):
                display = candidate
                break
        else:
            display = display or "Monster"

    display = _STRIPPED_WORDS.sub("", display)
    return _WHITESPACE.sub(" ", display).strip()


def classify_type(
    type_string: str | None,
    existing_tags: Iterable[str] | None = None,
    *,
    race: str | None = None,
    sub_type: str | None = None,
    frame_type: str | None = None,
    typeline: Sequence[str] | None = None,
) -> TypeClassification:
    """
    Classify a card's type into a display type and tag list.

    Args:
        type_string: Raw type, e.g. "Synchro Tuner Effect Monster"
        existing_tags: Tags already on the record (take precedence as seed)
        race: Legacy race field, used as seed when no tags exist
        sub_type: Legacy subType field, used as seed when no tags exist
        frame_type: Card database frame type ("normal", "effect", ...)
        typeline: Card database typeline, e.g. ["Dragon", "Synchro", "Effect"]

    Returns:
        TypeClassification with the canonical display type and tags.
    """
    raw_type = type_string if isinstance(type_string, str) else ""

    tags: list[str] = []
    for tag in existing_tags or ():
        if isinstance(tag, str):
            _add(tags, tag.strip())
    if not tags:
        for legacy in (race, sub_type):
            if isinstance(legacy, str):
                _add(tags, legacy.strip())

    had_effect_tag = EFFECT_TAG in tags
    had_non_effect_tag = NON_EFFECT_TAG in tags

    for keyword in MECHANICAL_KEYWORDS:
        if keyword in raw_type:
            _add(tags, keyword)
    for alias, keyword in _KEYWORD_ALIASES.items():
        if alias in raw_type:
            _add(tags, keyword)

    is_monster = _is_monster(raw_type, frame_type, typeline) or had_effect_tag or had_non_effect_tag
    if is_monster:
        tags = _resolve_effect(
            tags, raw_type, frame_type, typeline, had_effect_tag, had_non_effect_tag
        )

    return TypeClassification(
        display_type=_display_type(raw_type, tags, is_monster),
        type_tags=tuple(tags),
    )


def is_extra_deck_type(tags: Iterable[str]) -> bool:
    """True when the tags mark an extra deck monster."""
    return any(tag in EXTRA_DECK_TAGS for tag in tags)


def is_monster_tags(tags: Iterable[str]) -> bool:
    """True when the tags carry a monster's Effect / Non-Effect marker."""
    return any(tag in (EFFECT_TAG, NON_EFFECT_TAG) for tag in tags)
