"""Picks operations as called by request handlers and the scoring job.

Flow for a submission:
1. Dedupe the picked names
2. Resolve the event (the 'latest' alias is allowed)
3. Reject if the event has started, then validate against the card
4. Save under the event's true id

Reads resolve the event and reconcile the score before returning.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from fightpicks.config import Settings, get_settings
from fightpicks.events.aggregator import resolve_many
from fightpicks.events.models import LATEST_EVENT_ID, EventSummary
from fightpicks.events.resolver import EventResolver
from fightpicks.shared.errors import PicksClosedError

from .interfaces import PicksStore
from .models import Picks, PicksFilter, PicksWithEvent, unique_winners
from .reconcile import BatchScoreResult, is_scoreable, reconcile_batch, reconcile_score
from .validation import validate_picks


class PicksService:
    def __init__(
        self,
        resolver: EventResolver,
        store: PicksStore,
        *,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.resolver = resolver
        self.store = store
        self.settings = settings or get_settings()
        self.logger = logger or logging.getLogger(__name__)

    async def get_picks(self, user_id: str, event_id: str) -> Picks:
        """The user's picks for an event, scored if the event is over.

        Returns empty picks when the user has not submitted any.
        """
        event = await self.resolver.resolve(event_id)
        picks = await self.store.get_picks(user_id, event.id)
        if picks is None:
            return Picks(user_id=user_id, event_id=event.id)
        await reconcile_score(event, picks, self.store, logger=self.logger)
        return picks

    async def list_picks(self, user_id: str) -> List[PicksWithEvent]:
        """Every picks row of a user with its event, newest first."""
        all_picks = await self.store.get_all_user_picks(user_id)
        if not all_picks:
            return []

        events = await resolve_many(
            self.resolver,
            [p.event_id for p in all_picks],
            max_concurrency=self.settings.aggregator.max_concurrency,
            logger=self.logger,
        )

        rows: List[PicksWithEvent] = []
        for p in all_picks:
            event = events[p.event_id]
            await reconcile_score(event, p, self.store, logger=self.logger)
            rows.append(PicksWithEvent(picks=p, event=event))
        return rows

    async def submit_picks(
        self,
        user_id: str,
        event_id: str,
        winners: Sequence[str],
        *,
        now: Optional[datetime] = None,
    ) -> Picks:
        """Validate and save a user's picks.

        Raises:
            PicksClosedError: if the event has already started
            PicksValidationError: if the picks break a card rule
            PersistenceError: if the picks cannot be saved
        """
        picked = unique_winners(winners)
        event = await self.resolver.resolve(event_id)

        if event.has_started(now):
            raise PicksClosedError(event.id)
        validate_picks(event, picked)

        await self.store.save_winners(user_id, event.id, picked)
        self.logger.info({"picks_saved": {"user_id": user_id, "event_id": event.id, "count": len(picked)}})
        return Picks(user_id=user_id, event_id=event.id, winners=picked)

    async def score_latest(self) -> Optional[BatchScoreResult]:
        """Score all unscored picks for the latest event once it is finished.

        Returns None when there is nothing to do yet.
        """
        event = await self.resolver.resolve(LATEST_EVENT_ID)
        if not is_scoreable(event):
            self.logger.info({"score_job": {"event_id": event.id, "skipped": "latest event is not finished"}})
            return None

        unscored = await self.store.get_picks_by_filter(PicksFilter(event_ids=[event.id], has_score=False))
        if not unscored:
            self.logger.info({"score_job": {"event_id": event.id, "skipped": "all picks scored"}})
            return BatchScoreResult(event_id=event.id)

        self.logger.info({"score_job": {"event_id": event.id, "total": len(unscored)}})
        return await reconcile_batch(event, unscored, self.store, logger=self.logger)

    async def schedule(self) -> List[EventSummary]:
        return await self.resolver.schedule()


__all__ = ["PicksService"]
