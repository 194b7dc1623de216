"""Tests for picks/validation.py."""

from __future__ import annotations

import pytest

from fightpicks.picks.validation import is_valid_picks, validate_picks
from fightpicks.shared.errors import PicksValidationError, RejectionReason


class TestValidatePicks:
    """Card rules for picks. The card is A vs B, C vs D, E vs F."""

    @pytest.fixture
    def event(self, event_factory):
        return event_factory("600040300")

    @pytest.mark.parametrize("picks", [[], ["A"], ["A", "D", "E"], ["F", "B"]])
    def test_accepts(self, event, picks):
        validate_picks(event, picks)
        assert is_valid_picks(event, picks) is True

    def test_too_many_picks(self, event):
        """Checked before anything else, so the name check never runs."""
        with pytest.raises(PicksValidationError) as exc_info:
            validate_picks(event, ["A", "C", "E", "D"])
        assert exc_info.value.reason is RejectionReason.TOO_MANY_PICKS

    def test_unknown_fighter(self, event):
        with pytest.raises(PicksValidationError) as exc_info:
            validate_picks(event, ["G"])
        assert exc_info.value.reason is RejectionReason.UNKNOWN_FIGHTER
        assert exc_info.value.detail == "G"

    def test_both_sides_of_a_fight(self, event):
        with pytest.raises(PicksValidationError) as exc_info:
            validate_picks(event, ["C", "E", "D"])
        assert exc_info.value.reason is RejectionReason.SAME_FIGHT
        assert str(exc_info.value) == "same_fight: C vs D"

    def test_order_does_not_matter(self, event):
        assert is_valid_picks(event, ["E", "A", "D"]) == is_valid_picks(event, ["A", "D", "E"])
        assert is_valid_picks(event, ["D", "C"]) == is_valid_picks(event, ["C", "D"]) is False

    def test_empty_card_rejects_any_pick(self, event_factory):
        event = event_factory("600040301", card=[])
        validate_picks(event, [])
        with pytest.raises(PicksValidationError):
            validate_picks(event, ["A"])

    def test_finished_event_still_validates(self, finished_event):
        """Validation only looks at the card, not whether picks are closed."""
        validate_picks(finished_event, ["B", "C", "F"])
