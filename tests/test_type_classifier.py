"""Tests for card type classification."""

import logging

import pytest

from duelvault.services.type_classifier import (
    EFFECT_TAG,
    NON_EFFECT_TAG,
    classify_type,
    is_extra_deck_type,
    is_monster_tags,
)


class TestMechanicalKeywords:
    def test_synchro_tuner_effect(self) -> None:
        """Keywords become tags and the display type drops Tuner / Effect."""
        result = classify_type("Synchro Tuner Effect Monster")

        assert result.display_type == "Synchro Monster"
        assert "Synchro" in result.type_tags
        assert "Tuner" in result.type_tags
        assert EFFECT_TAG in result.type_tags
        assert NON_EFFECT_TAG not in result.type_tags

    def test_upper_case_xyz_maps_to_xyz_tag(self) -> None:
        """The card database spells it XYZ; the tag is Xyz."""
        result = classify_type("XYZ Monster", typeline=["Warrior", "Xyz", "Effect"])

        assert "Xyz" in result.type_tags
        assert result.display_type == "XYZ Monster"
        assert is_extra_deck_type(result.type_tags)

    def test_pendulum_normal_display(self) -> None:
        result = classify_type("Pendulum Normal Monster", frame_type="normal_pendulum")

        assert result.display_type == "Pendulum Normal Monster"
        assert NON_EFFECT_TAG in result.type_tags

    def test_tuner_never_in_display(self) -> None:
        result = classify_type("Tuner Monster", [EFFECT_TAG])

        assert "Tuner" not in result.display_type
        assert "Tuner" in result.type_tags

    def test_tags_are_deduplicated(self) -> None:
        result = classify_type("Fusion Effect Monster", ["Fusion", "Fusion", "Fiend"])

        assert result.type_tags.count("Fusion") == 1


class TestEffectExclusivity:
    @pytest.mark.parametrize(
        ("type_string", "kwargs"),
        [
            ("Effect Monster", {}),
            ("Normal Monster", {}),
            ("Monster", {}),
            ("Toon Monster", {}),
            ("Monster", {"typeline": ["Warrior", "Effect"]}),
            ("", {"frame_type": "effect"}),
            ("Link Effect Monster", {"frame_type": "link"}),
        ],
    )
    def test_monsters_carry_exactly_one(self, type_string: str, kwargs: dict) -> None:
        """Every monster ends with exactly one of Effect / Non-Effect."""
        result = classify_type(type_string, **kwargs)

        markers = [t for t in result.type_tags if t in (EFFECT_TAG, NON_EFFECT_TAG)]
        assert len(markers) == 1

    def test_normal_frame_overrides_effect_tag(self, caplog: pytest.LogCaptureFixture) -> None:
        """A normal frame wins over a stale Effect tag, and the conflict is logged."""
        with caplog.at_level(logging.WARNING, logger="duelvault.services.type_classifier"):
            result = classify_type("Normal Monster", ["Dragon", EFFECT_TAG], frame_type="normal")

        assert result.type_tags == ("Dragon", "Normal", NON_EFFECT_TAG)
        assert "type_tag_conflict" in caplog.text

    def test_stray_effect_tag_on_normal_monster(self) -> None:
        result = classify_type("Normal Monster", [EFFECT_TAG])

        assert result.type_tags == ("Normal", NON_EFFECT_TAG)

    def test_normal_frame_overrides_effect_type_string(self) -> None:
        result = classify_type("Effect Monster", frame_type="normal")

        assert EFFECT_TAG not in result.type_tags
        assert NON_EFFECT_TAG in result.type_tags
        assert result.display_type == "Normal Monster"

    def test_typeline_effect_marks_effect(self) -> None:
        result = classify_type("Monster", typeline=["Warrior", "Effect"])

        assert result.type_tags == (EFFECT_TAG,)
        assert result.display_type == "Monster"

    @pytest.mark.parametrize("subtype", ["Toon", "Spirit", "Gemini", "Union", "Flip"])
    def test_effect_implying_subtypes(self, subtype: str) -> None:
        result = classify_type(f"{subtype} Monster")

        assert EFFECT_TAG in result.type_tags

    def test_no_signal_is_non_effect(self) -> None:
        result = classify_type("Monster")

        assert result.type_tags == (NON_EFFECT_TAG,)

    def test_conflicting_legacy_tags_resolve_to_non_effect(self) -> None:
        """Both markers and no authoritative signal: Non-Effect wins."""
        result = classify_type("Monster", [EFFECT_TAG, NON_EFFECT_TAG])

        assert result.type_tags == (NON_EFFECT_TAG,)

    @pytest.mark.parametrize("type_string", ["Spell Card", "Trap Card"])
    def test_spells_and_traps_have_no_marker(self, type_string: str) -> None:
        result = classify_type(type_string, ["Continuous"])

        assert result.display_type == type_string
        assert result.type_tags == ("Continuous",)
        assert not result.is_monster


class TestLegacySeeds:
    def test_race_and_subtype_seed_tags(self) -> None:
        result = classify_type("Effect Monster", race="Spellcaster", sub_type="Tuner")

        assert result.type_tags[:2] == ("Spellcaster", "Tuner")
        assert EFFECT_TAG in result.type_tags

    def test_existing_tags_take_precedence_over_race(self) -> None:
        result = classify_type("Monster", ["Zombie"], race="Dragon")

        assert "Zombie" in result.type_tags
        assert "Dragon" not in result.type_tags

    def test_missing_type_string(self) -> None:
        result = classify_type(None)

        assert result.display_type == ""
        assert result.type_tags == ()


class TestFixedPoint:
    @pytest.mark.parametrize(
        ("type_string", "kwargs"),
        [
            ("Synchro Tuner Effect Monster", {}),
            ("Normal Monster", {"race": "Dragon"}),
            ("Effect Monster", {}),
            ("Toon Monster", {}),
            ("Pendulum Effect Monster", {"frame_type": "effect_pendulum"}),
            ("XYZ Monster", {"typeline": ["Warrior", "Xyz", "Effect"]}),
            ("Spell Card", {"race": "Quick-Play"}),
        ],
    )
    def test_classifying_canonical_output_is_stable(self, type_string: str, kwargs: dict) -> None:
        """Feeding a classification back in changes nothing."""
        first = classify_type(type_string, **kwargs)
        second = classify_type(first.display_type, first.type_tags)

        assert second == first


class TestHelpers:
    def test_is_monster_tags(self) -> None:
        assert is_monster_tags(["Dragon", EFFECT_TAG])
        assert is_monster_tags([NON_EFFECT_TAG])
        assert not is_monster_tags(["Quick-Play"])

    def test_is_extra_deck_type(self) -> None:
        assert is_extra_deck_type(["Fusion"])
        assert is_extra_deck_type(["Dragon", "Link", EFFECT_TAG])
        assert not is_extra_deck_type(["Ritual", EFFECT_TAG])
