"""Playback Synchronizer - binds the queue's current track to the audio output."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.shared.events import (
    CurrentTrackChanged,
    EventBus,
    PlaybackFaulted,
    QueueExhausted,
    get_event_bus,
)
from ...domain.shared.exceptions import PlaybackFaultError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import PlaybackQueue, TrackMetadata
    from ..interfaces.audio_output import AudioOutput

logger = logging.getLogger(__name__)

PositionListener = Callable[[float, float | None], None]
TrackChangeListener = Callable[["TrackMetadata | None"], None]

DEFAULT_SEEK_TOLERANCE_SECONDS = 0.25


class PlaybackSynchronizer:
    """Sole writer of the audio output's source, position and play state.

    The output handle is injected so tests can substitute a fake. Loading a
    different track always ends in playback once the output reports ready.
    """

    def __init__(
        self,
        *,
        audio_output: AudioOutput,
        queue: PlaybackQueue,
        event_bus: EventBus | None = None,
        seek_tolerance_seconds: float = DEFAULT_SEEK_TOLERANCE_SECONDS,
    ) -> None:
        self._output = audio_output
        self._queue = queue
        self._bus = event_bus or get_event_bus()
        self._seek_tolerance = seek_tolerance_seconds

        self._desired_playing = False
        self._desired_position: float | None = None
        self._position_listeners: list[PositionListener] = []
        self._track_change_listeners: list[TrackChangeListener] = []

        self._output.set_on_ready_callback(self._on_ready)
        self._output.set_on_position_changed_callback(self._on_position_changed)
        self._output.set_on_duration_known_callback(self._on_duration_known)
        self._output.set_on_ended_callback(self._on_ended)
        self._output.set_on_error_callback(self._on_error)

    # ── Listeners ───────────────────────────────────────────────────

    def add_position_listener(self, listener: PositionListener) -> None:
        self._position_listeners.append(listener)

    def add_track_change_listener(self, listener: TrackChangeListener) -> None:
        self._track_change_listeners.append(listener)

    # ── State ───────────────────────────────────────────────────────

    @property
    def desired_playing(self) -> bool:
        return self._desired_playing

    @property
    def desired_position(self) -> float | None:
        return self._desired_position

    @property
    def position(self) -> float:
        return self._output.position

    @property
    def duration(self) -> float | None:
        if self._output.duration is not None:
            return self._output.duration
        track = self._queue.current_track
        return track.duration_seconds if track else None

    # ── Commands ────────────────────────────────────────────────────

    async def sync_current(self) -> None:
        """Make the output reflect the queue's current track.

        A different track is loaded from position zero and starts playing as
        soon as it is ready. The same track only has its play state reconciled.
        """
        track = self._queue.current_track
        if track is None:
            await self._unload()
            return

        if self._output.loaded_track_id == track.id:
            await self._reconcile_play_state()
            return

        logger.info(LogTemplates.PLAYBACK_LOADING, track.title, track.id)
        self._desired_playing = True
        self._desired_position = 0.0
        await self._output.load(track.id, track.locator)
        await self._output.seek(0.0)

        self._notify_track_change(track)
        await self._bus.publish(
            CurrentTrackChanged(
                genre_id=track.genre_id,
                track_id=track.id,
                track_title=track.title,
                history_index=self._queue.current_index,
            )
        )

        # The output may have become ready synchronously inside load().
        if self._output.loaded_track_id == track.id:
            await self._reconcile_play_state()

    async def play(self) -> None:
        self._desired_playing = True
        await self._reconcile_play_state()

    async def pause(self) -> None:
        self._desired_playing = False
        await self._reconcile_play_state()

    async def seek(self, position: float) -> None:
        """Request a new position; applied only beyond the drift tolerance."""
        self._desired_position = max(0.0, float(position))
        await self.reconcile_position()

    async def reconcile_position(self) -> bool:
        """Correct the output's position if it drifted from the desired one.

        Returns:
            True if a seek was issued.
        """
        desired = self._desired_position
        if desired is None or self._output.loaded_track_id is None:
            return False
        drift = abs(self._output.position - desired)
        if drift <= self._seek_tolerance:
            return False
        logger.debug(LogTemplates.PLAYBACK_SEEK_CORRECTION, self._output.position, desired)
        await self._output.seek(desired)
        return True

    async def stop(self) -> None:
        await self._unload()

    # ── Output callbacks ────────────────────────────────────────────

    async def _on_ready(self) -> None:
        current = self._queue.current_track
        if current is None or self._output.loaded_track_id != current.id:
            return
        await self._reconcile_play_state()

    async def _on_position_changed(self, position: float) -> None:
        # Follow the output's own clock so only user seeks register as drift.
        self._desired_position = position
        duration = self.duration
        for listener in list(self._position_listeners):
            listener(position, duration)

    async def _on_duration_known(self, duration: float) -> None:
        current = self._queue.current_track
        if current is None or self._output.loaded_track_id != current.id:
            return
        if current.duration_seconds != duration:
            self._queue.replace_current(current.with_duration(duration))

    async def _on_ended(self) -> None:
        current = self._queue.current_track
        if current is None or self._output.loaded_track_id != current.id:
            logger.debug(LogTemplates.PLAYBACK_STALE_SIGNAL, "ended")
            return

        following = self._queue.advance()
        if following is not None:
            logger.info(LogTemplates.PLAYBACK_ADVANCED, current.title, following.title)
            await self.sync_current()
            return

        self._desired_playing = False
        logger.info(LogTemplates.QUEUE_EXHAUSTED, current.genre_id)
        await self._bus.publish(
            QueueExhausted(
                genre_id=current.genre_id,
                last_track_id=current.id,
                last_track_title=current.title,
            )
        )

    async def _on_error(self, message: str) -> None:
        await self._fault(message)

    # ── Internals ───────────────────────────────────────────────────

    async def _reconcile_play_state(self) -> None:
        if self._output.loaded_track_id is None or not self._output.is_ready:
            return
        if self._desired_playing and self._output.is_paused:
            try:
                await self._output.play()
            except PlaybackFaultError as exc:
                await self._fault(exc.message)
        elif not self._desired_playing and not self._output.is_paused:
            await self._output.pause()

    async def _fault(self, message: str) -> None:
        track_id = self._output.loaded_track_id
        self._desired_playing = False
        logger.error(LogTemplates.PLAYBACK_FAULT, track_id, message)
        await self._bus.publish(PlaybackFaulted(track_id=track_id, message=message))

    async def _unload(self) -> None:
        self._desired_playing = False
        self._desired_position = None
        if self._output.loaded_track_id is not None:
            await self._output.unload()
            self._notify_track_change(None)

    def _notify_track_change(self, track: TrackMetadata | None) -> None:
        for listener in list(self._track_change_listeners):
            listener(track)
