"""Tests for events/models.py - Event, Fight and start time handling."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from fightpicks.events.models import (
    LIVE_START_TIME,
    Event,
    Fight,
    StartState,
    format_start_time,
    parse_start_time,
)

NOW = datetime(2025, 3, 1, 20, 0, tzinfo=timezone.utc)


class TestParseStartTime:
    """Tests for parse_start_time."""

    def test_zulu_suffix(self):
        """Trailing Z is read as UTC."""
        assert parse_start_time("2025-03-01T20:00:00Z") == NOW

    def test_offset_converted_to_utc(self):
        """Offsets are normalised to UTC."""
        assert parse_start_time("2025-03-01T15:00:00-05:00") == NOW

    def test_naive_assumed_utc(self):
        """Naive timestamps are taken as UTC."""
        assert parse_start_time("2025-03-01T20:00:00") == NOW

    def test_live_sentinel(self):
        assert parse_start_time(LIVE_START_TIME) is None

    def test_garbage(self):
        assert parse_start_time("Saturday night") is None
        assert parse_start_time("") is None

    def test_format_roundtrip(self):
        """format_start_time writes RFC 3339 with a Z suffix."""
        assert format_start_time(NOW) == "2025-03-01T20:00:00Z"
        assert parse_start_time(format_start_time(NOW)) == NOW


class TestFight:
    """Tests for the Fight model."""

    def test_requires_two_fighters(self):
        with pytest.raises(ValidationError, match="exactly two fighters"):
            Fight(fighters=["A", "B", "C"])

    def test_winner_must_be_in_fight(self):
        with pytest.raises(ValidationError, match="not one of"):
            Fight(fighters=["A", "B"], winner="C")

    def test_blank_winner_is_unresolved(self):
        """An empty winner string means no result yet."""
        fight = Fight(fighters=["A", "B"], winner="")
        assert fight.winner is None
        assert fight.is_resolved is False


class TestEventState:
    """Tests for has_started, is_finished and start_state."""

    def _event(self, start_time: str, winners=(None, None)) -> Event:
        return Event(
            id="1",
            start_time=start_time,
            fights=[
                Fight(fighters=["A", "B"], winner=winners[0]),
                Fight(fighters=["C", "D"], winner=winners[1]),
            ],
        )

    def test_live_has_started(self):
        event = self._event(LIVE_START_TIME)
        assert event.has_started(NOW) is True
        assert event.start_state is StartState.LIVE

    def test_future_has_not_started(self):
        event = self._event(format_start_time(NOW + timedelta(minutes=1)))
        assert event.has_started(NOW) is False
        assert event.start_state is StartState.SCHEDULED

    def test_start_time_equal_to_now_has_started(self):
        """Not after now counts as started."""
        event = self._event(format_start_time(NOW))
        assert event.has_started(NOW) is True

    def test_unparsable_counts_as_started(self):
        event = self._event("TBA")
        assert event.has_started(NOW) is True
        assert event.start_state is StartState.UNKNOWN

    def test_finished_needs_every_winner(self):
        assert self._event(LIVE_START_TIME, ("A", None)).is_finished() is False
        assert self._event(LIVE_START_TIME, ("A", "D")).is_finished() is True

    def test_empty_card_is_finished(self):
        """No fights is vacuously finished."""
        event = Event(id="1", start_time=LIVE_START_TIME, fights=[])
        assert event.is_finished() is True

    def test_fighter_on_two_fights_rejected(self):
        """A name may appear only once across the whole card."""
        with pytest.raises(ValidationError, match="more than one fight"):
            Event(
                id="1",
                start_time=LIVE_START_TIME,
                fights=[Fight(fighters=["A", "B"]), Fight(fighters=["A", "C"])],
            )

    def test_same_fighter_twice_in_one_fight_rejected(self):
        with pytest.raises(ValidationError):
            Event(id="1", start_time=LIVE_START_TIME, fights=[Fight(fighters=["A", "A"])])

    def test_fighter_index(self):
        event = self._event(LIVE_START_TIME)
        assert event.fighter_index() == {"A": 0, "B": 0, "C": 1, "D": 1}

    def test_json_keeps_live_sentinel(self):
        """Serialized events keep the stored field names and the LIVE string."""
        event = self._event(LIVE_START_TIME, ("A", None))
        data = event.model_dump(mode="json", exclude_none=True)
        assert data["start_time"] == "LIVE"
        assert data["fights"][1] == {"fighters": ["C", "D"]}
        assert Event.model_validate(data) == event
