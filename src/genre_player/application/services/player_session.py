"""Player Session Service - the entry point the UI drives."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.shared.enums import AcquisitionStatus, NextTrackOutcome, PurposeTag
from ...domain.shared.events import (
    AcquisitionStatusChanged,
    EventBus,
    GenreChanged,
    NextTrackStaged,
    QueueExhausted,
    get_event_bus,
)
from ...domain.shared.exceptions import InvalidOperationError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from .acquisition_models import (
    AcquisitionCancelled,
    AcquisitionResult,
    AcquisitionSucceeded,
    GenreSelectionResult,
    NextTrackResult,
)

if TYPE_CHECKING:
    from ...domain.music.catalog import GenreCatalog
    from ...domain.music.entities import Genre, PlaybackQueue, TrackMetadata
    from ..interfaces.track_provider import TrackProvider
    from .acquisition_service import TrackAcquisitionCoordinator
    from .parameter_store import LiveParameterStore
    from .playback_synchronizer import PlaybackSynchronizer
    from .prefetch_scheduler import PrefetchScheduler

logger = logging.getLogger(__name__)


class PlayerSessionService:
    """Maps user actions onto acquisitions, queue updates and playback.

    ``select_genre``, ``request_next`` and ``request_explicit_prefetch`` each
    acquire under their own purpose tag. Every result is checked against the
    session's genre generation before it touches the queue, so an answer for
    an abandoned genre is released instead of applied.
    """

    def __init__(
        self,
        *,
        coordinator: TrackAcquisitionCoordinator,
        queue: PlaybackQueue,
        synchronizer: PlaybackSynchronizer,
        scheduler: PrefetchScheduler,
        parameters: LiveParameterStore,
        provider: TrackProvider,
        catalog: GenreCatalog | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._queue = queue
        self._synchronizer = synchronizer
        self._scheduler = scheduler
        self._parameters = parameters
        self._provider = provider
        self._catalog = catalog
        self._bus = event_bus or get_event_bus()

        self._genre: Genre | None = None
        self._target_genre: Genre | None = None
        self._generation = 0
        self._advance_when_staged = False
        self._started = False

    # ── Lifecycle ───────────────────────────────────────────────────

    def start(self) -> None:
        if self._started:
            return
        self._synchronizer.add_position_listener(self._scheduler.evaluate)
        self._synchronizer.add_track_change_listener(self._scheduler.on_track_changed)
        self._bus.subscribe(QueueExhausted, self._on_queue_exhausted)
        self._bus.subscribe(NextTrackStaged, self._on_next_staged)
        self._bus.subscribe(AcquisitionStatusChanged, self._on_acquisition_status)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(QueueExhausted, self._on_queue_exhausted)
        self._bus.unsubscribe(NextTrackStaged, self._on_next_staged)
        self._bus.unsubscribe(AcquisitionStatusChanged, self._on_acquisition_status)
        self._started = False

    async def close(self) -> None:
        """Cancel everything in flight, drop the queue and silence the output."""
        self.stop()
        self._generation += 1
        self._advance_when_staged = False
        self._coordinator.cancel_all("session closed")
        await self._scheduler.aclose()
        await self._release_all(self._queue.reset())
        await self._synchronizer.stop()
        self._genre = None
        self._target_genre = None
        self._parameters.clear()
        logger.info(LogTemplates.SESSION_CLOSED)

    # ── State ───────────────────────────────────────────────────────

    @property
    def genre(self) -> Genre | None:
        return self._genre

    @property
    def queue(self) -> PlaybackQueue:
        return self._queue

    @property
    def parameters(self) -> LiveParameterStore:
        return self._parameters

    @property
    def genre_switch_in_progress(self) -> bool:
        return self._target_genre is not None

    @property
    def is_playing(self) -> bool:
        return self._synchronizer.desired_playing

    @property
    def current_track(self) -> TrackMetadata | None:
        return self._queue.current_track

    # ── User actions ────────────────────────────────────────────────

    async def select_genre(self, genre: Genre | str) -> GenreSelectionResult:
        """Switch the session to *genre* and start playing a fresh track.

        Reselecting the active genre (or the one being switched to) does nothing.
        The current track keeps playing until the new genre's first track arrives.
        """
        genre = self._resolve_genre(genre)
        pending = self._target_genre
        if (pending is not None and pending == genre) or (pending is None and self._genre == genre):
            logger.debug(LogTemplates.GENRE_RESELECTED, genre.id)
            return GenreSelectionResult(genre_id=genre.id, changed=False, track=self._queue.current_track)

        self._generation += 1
        generation = self._generation
        self._target_genre = genre
        self._advance_when_staged = False
        logger.info(LogTemplates.GENRE_SWITCH_STARTED, self._genre.id if self._genre else None, genre.id)

        self._scheduler.begin_genre_switch()
        self._coordinator.cancel(PurposeTag.EXPLICIT_NEXT, "genre switch")

        result = await self._coordinator.acquire(genre, PurposeTag.GENRE_SWITCH)

        if generation != self._generation:
            # A newer selection owns the switch state now.
            if isinstance(result, AcquisitionSucceeded):
                await self._provider.release(result.track)
            return GenreSelectionResult(genre_id=genre.id, changed=False, result=result)

        self._target_genre = None
        if not isinstance(result, AcquisitionSucceeded):
            logger.warning(LogTemplates.GENRE_SWITCH_ABANDONED, genre.id, result.outcome)
            self._scheduler.end_genre_switch(self._genre)
            return GenreSelectionResult(genre_id=genre.id, changed=False, result=result)

        previous = self._genre
        await self._release_all(self._queue.reset())
        self._genre = genre
        self._parameters.activate(genre)
        self._queue.set_current(result.track)
        self._scheduler.end_genre_switch(genre)

        await self._bus.publish(
            GenreChanged(
                genre_id=genre.id,
                genre_label=genre.label,
                previous_genre_id=previous.id if previous else None,
            )
        )
        await self._synchronizer.sync_current()
        return GenreSelectionResult(genre_id=genre.id, changed=True, track=result.track, result=result)

    async def request_next(self) -> NextTrackResult:
        """Move to the next track, fetching one if nothing is staged.

        While the background prefetch is still running no second request is
        made; the queue advances as soon as that prefetch stages its track.
        """
        if self.genre_switch_in_progress:
            return NextTrackResult(
                outcome=NextTrackOutcome.GENRE_SWITCHING, message=ErrorMessages.GENRE_SWITCH_IN_PROGRESS
            )
        genre = self._genre
        if genre is None:
            return NextTrackResult(outcome=NextTrackOutcome.NO_GENRE, message=ErrorMessages.NO_GENRE_SELECTED)

        if self._scheduler.in_flight and not (self._queue.has_next or self._queue.has_successor):
            self._advance_when_staged = True
            logger.info(LogTemplates.NEXT_WAITING_FOR_PREFETCH, genre.id)
            return NextTrackResult(outcome=NextTrackOutcome.PENDING, message=ErrorMessages.NEXT_TRACK_PREPARING)

        following = self._queue.advance()
        if following is not None:
            await self._synchronizer.sync_current()
            return NextTrackResult(outcome=NextTrackOutcome.ADVANCED, track=following)

        return await self._acquire_next(genre)

    async def request_explicit_prefetch(self) -> AcquisitionResult:
        """Stage a track built from the current parameters without playing it.

        The result overwrites any staged next track. Playback is untouched.
        """
        genre = self._genre
        if genre is None:
            raise InvalidOperationError("request_explicit_prefetch", "no genre selected")
        if self.genre_switch_in_progress:
            return AcquisitionCancelled(purpose=PurposeTag.PREFETCH, reason="genre switch in progress")

        generation = self._generation
        result = await self._coordinator.acquire(genre, PurposeTag.PREFETCH)
        if not isinstance(result, AcquisitionSucceeded):
            return result

        if generation != self._generation or self._genre != genre or self.genre_switch_in_progress:
            await self._provider.release(result.track)
            return AcquisitionCancelled(purpose=PurposeTag.PREFETCH, reason="genre changed")

        replaced = self._queue.set_next(result.track)
        if replaced is not None:
            await self._provider.release(replaced)
        logger.info(LogTemplates.NEXT_TRACK_APPLIED, result.track.title)
        await self._bus.publish(
            NextTrackStaged(
                genre_id=genre.id,
                track_id=result.track.id,
                track_title=result.track.title,
                purpose=PurposeTag.PREFETCH,
            )
        )
        return result

    async def previous(self) -> TrackMetadata | None:
        """Step back in history. Returns None at the first track."""
        track = self._queue.retreat()
        if track is None:
            logger.debug(LogTemplates.QUEUE_AT_FIRST_TRACK)
            return None
        self._advance_when_staged = False
        await self._synchronizer.sync_current()
        return track

    async def pause(self) -> None:
        await self._synchronizer.pause()

    async def resume(self) -> None:
        await self._synchronizer.play()

    async def seek(self, position: float) -> None:
        await self._synchronizer.seek(position)

    def set_parameter(self, parameter_id: str, value: float) -> float:
        return self._parameters.set_value(parameter_id, value)

    # ── Event handlers ──────────────────────────────────────────────

    async def _on_queue_exhausted(self, event: QueueExhausted) -> None:
        if self._genre is None or event.genre_id != self._genre.id or self.genre_switch_in_progress:
            return
        await self.request_next()

    async def _on_next_staged(self, event: NextTrackStaged) -> None:
        if not self._advance_when_staged:
            return
        if self._genre is None or event.genre_id != self._genre.id:
            return
        self._advance_when_staged = False
        if self._queue.advance() is not None:
            await self._synchronizer.sync_current()

    async def _on_acquisition_status(self, event: AcquisitionStatusChanged) -> None:
        # A waited-on prefetch that did not deliver falls back to an explicit fetch.
        if event.purpose != PurposeTag.PREFETCH or not self._advance_when_staged:
            return
        if event.status not in (AcquisitionStatus.FAILED, AcquisitionStatus.ABORTED):
            return
        if self._coordinator.is_in_flight(PurposeTag.PREFETCH):
            return
        self._advance_when_staged = False
        genre = self._genre
        if genre is None or self.genre_switch_in_progress or event.genre_id != genre.id:
            return
        await self._acquire_next(genre)

    # ── Internals ───────────────────────────────────────────────────

    async def _acquire_next(self, genre: Genre) -> NextTrackResult:
        generation = self._generation
        result = await self._coordinator.acquire(genre, PurposeTag.EXPLICIT_NEXT)

        if isinstance(result, AcquisitionCancelled):
            return NextTrackResult(outcome=NextTrackOutcome.ABORTED)
        if not isinstance(result, AcquisitionSucceeded):
            return NextTrackResult(outcome=NextTrackOutcome.FAILED, message=result.message)

        if generation != self._generation or self._genre != genre:
            await self._provider.release(result.track)
            return NextTrackResult(outcome=NextTrackOutcome.ABORTED)

        self._queue.set_current(result.track)
        await self._synchronizer.sync_current()
        return NextTrackResult(outcome=NextTrackOutcome.ADVANCED, track=result.track)

    def _resolve_genre(self, genre: Genre | str) -> Genre:
        if not isinstance(genre, str):
            return genre
        if self._catalog is None:
            raise InvalidOperationError("select_genre", "no catalog configured")
        return self._catalog.get(genre)

    async def _release_all(self, tracks: list[TrackMetadata]) -> None:
        for track in tracks:
            await self._provider.release(track)
