"""Prefetch Scheduler - fetches the next track in the background near track end."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ...domain.music.services import PrefetchPolicy
from ...domain.shared.enums import PrefetchState, PurposeTag
from ...domain.shared.events import EventBus, NextTrackStaged, PrefetchTriggered, get_event_bus
from ...domain.shared.messages import LogTemplates
from .acquisition_models import AcquisitionCancelled, AcquisitionSucceeded

if TYPE_CHECKING:
    from ...domain.music.entities import Genre, PlaybackQueue, TrackMetadata
    from ...domain.music.value_objects import TrackId
    from ..interfaces.track_provider import TrackProvider
    from .acquisition_service import TrackAcquisitionCoordinator

logger = logging.getLogger(__name__)


class PrefetchScheduler:
    """Watches playback position and stages the next track once per current track.

    State per current track: ``idle -> triggered -> ready | failed``. Any
    change of current track resets to ``idle``. A cancelled or failed attempt
    still counts, so the same track is never prefetched twice.
    """

    def __init__(
        self,
        *,
        coordinator: TrackAcquisitionCoordinator,
        queue: PlaybackQueue,
        provider: TrackProvider,
        policy: PrefetchPolicy | None = None,
        event_bus: EventBus | None = None,
        enabled: bool = True,
    ) -> None:
        self._coordinator = coordinator
        self._queue = queue
        self._provider = provider
        self._policy = policy or PrefetchPolicy()
        self._bus = event_bus or get_event_bus()
        self._enabled = enabled

        self._genre: Genre | None = None
        self._genre_switching = False
        self._track_id: TrackId | None = None
        self._state = PrefetchState.IDLE
        self._task: asyncio.Task[None] | None = None

    # ── State ───────────────────────────────────────────────────────

    @property
    def state(self) -> PrefetchState:
        return self._state

    @property
    def tracked_track_id(self) -> TrackId | None:
        return self._track_id

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def genre_switching(self) -> bool:
        return self._genre_switching

    @property
    def policy(self) -> PrefetchPolicy:
        return self._policy

    async def wait_idle(self) -> None:
        """Wait for the in-flight prefetch, if any, to settle."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.wait({task})

    # ── Session hooks ───────────────────────────────────────────────

    def begin_genre_switch(self) -> None:
        """Suppress triggering and abandon any prefetch for the old genre."""
        self._genre_switching = True
        if self._coordinator.cancel(PurposeTag.PREFETCH, "genre switch"):
            logger.info(LogTemplates.PREFETCH_CANCELLED, self._track_id, "genre switch")

    def end_genre_switch(self, genre: Genre | None) -> None:
        self._genre = genre
        self._genre_switching = False
        current = self._queue.current_track
        # A failed switch leaves the same track playing with its attempt spent.
        if (current.id if current is not None else None) != self._track_id:
            self._reset(current)

    def on_track_changed(self, track: TrackMetadata | None) -> None:
        """Track-change listener registered with the playback synchronizer."""
        new_id = track.id if track is not None else None
        if new_id == self._track_id:
            return
        if self.in_flight and self._coordinator.cancel(PurposeTag.PREFETCH, "track changed"):
            logger.info(LogTemplates.PREFETCH_CANCELLED, self._track_id, "track changed")
        self._reset(track)

    def evaluate(self, position: float, duration: float | None = None) -> bool:
        """Position listener. Starts a prefetch when every condition holds.

        Returns:
            True if this call triggered a prefetch.
        """
        if not self._enabled:
            return False

        track = self._queue.current_track
        if track is None or self._genre is None:
            return False
        if track.id != self._track_id:
            self._reset(track)
        if track.genre_id != self._genre.id:
            return False

        if duration is None:
            duration = track.duration_seconds

        if not self._policy.should_trigger(
            duration=duration,
            position=position,
            queue=self._queue,
            already_attempted=self._state != PrefetchState.IDLE,
            genre_switching=self._genre_switching,
        ):
            return False

        remaining = self._policy.remaining_seconds(duration, position) or 0.0
        self._state = PrefetchState.TRIGGERED
        logger.info(LogTemplates.PREFETCH_TRIGGERED, track.title, remaining)
        self._task = asyncio.create_task(
            self._prefetch(track, self._genre, remaining), name=f"prefetch-{track.id}"
        )
        return True

    async def aclose(self) -> None:
        self._coordinator.cancel(PurposeTag.PREFETCH, "scheduler closed")
        await self.wait_idle()
        self._task = None

    # ── Internals ───────────────────────────────────────────────────

    def _reset(self, track: TrackMetadata | None) -> None:
        self._track_id = track.id if track is not None else None
        self._state = PrefetchState.IDLE

    def _is_still_wanted(self, origin: TrackMetadata, genre: Genre) -> bool:
        current = self._queue.current_track
        return (
            current is not None
            and current.id == origin.id
            and not self._genre_switching
            and self._genre is not None
            and self._genre.id == genre.id
            and not self._queue.has_next
            and not self._queue.has_successor
        )

    def _settle(self, origin: TrackMetadata, state: PrefetchState) -> None:
        # Only the track that triggered may record the outcome.
        if self._track_id == origin.id:
            self._state = state

    async def _prefetch(self, origin: TrackMetadata, genre: Genre, remaining: float) -> None:
        await self._bus.publish(
            PrefetchTriggered(genre_id=genre.id, track_id=origin.id, remaining_seconds=max(0.0, remaining))
        )
        try:
            result = await self._coordinator.acquire(genre, PurposeTag.PREFETCH)
        except Exception:
            logger.exception(LogTemplates.PREFETCH_CRASHED, origin.id)
            self._settle(origin, PrefetchState.FAILED)
            return

        if isinstance(result, AcquisitionCancelled):
            logger.debug(LogTemplates.PREFETCH_ABORTED, origin.id, result.reason)
            self._settle(origin, PrefetchState.FAILED)
            return

        if not isinstance(result, AcquisitionSucceeded):
            logger.warning(LogTemplates.PREFETCH_FAILED, origin.id, result.kind, result.message)
            self._settle(origin, PrefetchState.FAILED)
            return

        staged = result.track
        if not self._is_still_wanted(origin, genre):
            logger.info(LogTemplates.PREFETCH_STALE_DISCARDED, staged.id, origin.id)
            self._settle(origin, PrefetchState.FAILED)
            await self._provider.release(staged)
            return

        replaced = self._queue.set_next(staged)
        if replaced is not None:
            await self._provider.release(replaced)
        self._settle(origin, PrefetchState.READY)
        logger.info(LogTemplates.PREFETCH_READY, staged.title)
        await self._bus.publish(
            NextTrackStaged(
                genre_id=genre.id,
                track_id=staged.id,
                track_title=staged.title,
                purpose=PurposeTag.PREFETCH,
            )
        )
