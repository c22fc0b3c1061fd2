"""Dependency Injection Container

Wires the provider, the request serializer, the acquisition coordinator, the
queue, the scheduler and the synchronizer into one player session. Components
are created on first access and cached for the life of the container.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..domain.shared.enums import ProviderKind

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.audio_output import AudioOutput
    from ..application.interfaces.track_provider import TrackProvider
    from ..application.services.acquisition_service import TrackAcquisitionCoordinator
    from ..application.services.parameter_store import LiveParameterStore
    from ..application.services.playback_synchronizer import PlaybackSynchronizer
    from ..application.services.player_session import PlayerSessionService
    from ..application.services.prefetch_scheduler import PrefetchScheduler
    from ..application.services.request_serializer import RequestSerializer
    from ..domain.music.catalog import GenreCatalog
    from ..domain.music.entities import PlaybackQueue
    from ..domain.shared.events import EventBus
    from ..infrastructure.provider.retry import RetryPolicy
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    One container backs one player session. Components are lazily
    initialized when first accessed.
    """

    settings: Settings
    _audio_output: AudioOutput | None = None
    _event_bus: EventBus | None = None

    # Infrastructure adapters
    _retry_policy: RetryPolicy | None = None
    _provider: TrackProvider | None = None

    # Domain state
    _catalog: GenreCatalog | None = None
    _queue: PlaybackQueue | None = None

    # Application services
    _serializer: RequestSerializer | None = None
    _parameter_store: LiveParameterStore | None = None
    _coordinator: TrackAcquisitionCoordinator | None = None
    _synchronizer: PlaybackSynchronizer | None = None
    _scheduler: PrefetchScheduler | None = None
    _session: PlayerSessionService | None = None

    _closed: bool = field(default=False, repr=False)

    def set_audio_output(self, audio_output: AudioOutput) -> None:
        """Set the playback resource the session drives."""
        self._audio_output = audio_output

    @property
    def audio_output(self) -> AudioOutput:
        if self._audio_output is None:
            raise RuntimeError("Audio output not set. Call set_audio_output() first.")
        return self._audio_output

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            from ..domain.shared.events import get_event_bus

            self._event_bus = get_event_bus()
        return self._event_bus

    # === Infrastructure Adapters ===

    @property
    def retry_policy(self) -> RetryPolicy:
        if self._retry_policy is None:
            from ..infrastructure.provider.retry import RetryPolicy

            retry = self.settings.retry
            self._retry_policy = RetryPolicy.from_values(
                retry.max_attempts, retry.backoff_base_seconds, retry.retryable_statuses
            )
        return self._retry_policy

    @property
    def provider(self) -> TrackProvider:
        """Get the track provider selected by ``PROVIDER__KIND``."""
        if self._provider is None:
            if self.settings.provider.kind == ProviderKind.MUSICGEN:
                from ..infrastructure.provider.musicgen_client import MusicGenTrackProvider

                self._provider = MusicGenTrackProvider(
                    self.settings.provider, retry_policy=self.retry_policy
                )
            else:
                from ..infrastructure.provider.freesound_client import FreesoundTrackProvider

                self._provider = FreesoundTrackProvider(
                    self.settings.provider, retry_policy=self.retry_policy
                )
        return self._provider

    # === Domain State ===

    @property
    def catalog(self) -> GenreCatalog:
        if self._catalog is None:
            from ..domain.music.catalog import build_default_catalog

            self._catalog = build_default_catalog()
        return self._catalog

    @property
    def queue(self) -> PlaybackQueue:
        if self._queue is None:
            from ..domain.music.entities import PlaybackQueue

            self._queue = PlaybackQueue()
        return self._queue

    # === Application Services ===

    @property
    def serializer(self) -> RequestSerializer:
        if self._serializer is None:
            from ..application.services.request_serializer import RequestSerializer

            self._serializer = RequestSerializer()
        return self._serializer

    @property
    def parameter_store(self) -> LiveParameterStore:
        if self._parameter_store is None:
            from ..application.services.parameter_store import LiveParameterStore

            self._parameter_store = LiveParameterStore()
        return self._parameter_store

    @property
    def coordinator(self) -> TrackAcquisitionCoordinator:
        if self._coordinator is None:
            from ..application.services.acquisition_service import (
                TrackAcquisitionCoordinator,
            )

            self._coordinator = TrackAcquisitionCoordinator(
                provider=self.provider,
                serializer=self.serializer,
                parameter_source=self.parameter_store,
                event_bus=self.event_bus,
            )
        return self._coordinator

    @property
    def synchronizer(self) -> PlaybackSynchronizer:
        if self._synchronizer is None:
            from ..application.services.playback_synchronizer import PlaybackSynchronizer

            self._synchronizer = PlaybackSynchronizer(
                audio_output=self.audio_output,
                queue=self.queue,
                event_bus=self.event_bus,
                seek_tolerance_seconds=self.settings.playback.seek_tolerance_seconds,
            )
        return self._synchronizer

    @property
    def scheduler(self) -> PrefetchScheduler:
        if self._scheduler is None:
            from ..application.services.prefetch_scheduler import PrefetchScheduler
            from ..domain.music.services import PrefetchPolicy

            self._scheduler = PrefetchScheduler(
                coordinator=self.coordinator,
                queue=self.queue,
                provider=self.provider,
                policy=PrefetchPolicy(threshold_seconds=self.settings.prefetch.threshold_seconds),
                event_bus=self.event_bus,
                enabled=self.settings.prefetch.enabled,
            )
        return self._scheduler

    @property
    def session(self) -> PlayerSessionService:
        if self._session is None:
            from ..application.services.player_session import PlayerSessionService

            self._session = PlayerSessionService(
                coordinator=self.coordinator,
                queue=self.queue,
                synchronizer=self.synchronizer,
                scheduler=self.scheduler,
                parameters=self.parameter_store,
                provider=self.provider,
                catalog=self.catalog,
                event_bus=self.event_bus,
            )
        return self._session

    # === Lifecycle ===

    def initialize(self) -> PlayerSessionService:
        """Build the session and start its event subscriptions."""
        session = self.session
        session.start()
        return session

    async def shutdown(self) -> None:
        """Close the session, the serializer and the provider, in that order."""
        if self._closed:
            return
        self._closed = True

        if self._session is not None:
            await self._session.close()
        if self._serializer is not None:
            await self._serializer.aclose()
        if self._provider is not None:
            await self._provider.aclose()
        logger.info("Container shut down")


def create_container(settings: Settings, audio_output: AudioOutput | None = None) -> Container:
    """Create a new dependency injection container."""
    container = Container(settings)
    if audio_output is not None:
        container.set_audio_output(audio_output)
    return container
