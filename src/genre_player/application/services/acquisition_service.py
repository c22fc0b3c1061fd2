"""Track Acquisition Coordinator - turns a genre request into a playable track."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ...domain.music.services import ParameterResolutionService
from ...domain.shared.enums import AcquisitionStatus, FailureKind, PurposeTag
from ...domain.shared.events import AcquisitionStatusChanged, EventBus, get_event_bus
from ...domain.shared.exceptions import AcquisitionCancelledError, AcquisitionError
from ...domain.shared.messages import LogTemplates
from .acquisition_models import (
    AcquisitionCancelled,
    AcquisitionFailed,
    AcquisitionResult,
    AcquisitionSucceeded,
    AcquisitionTask,
)

if TYPE_CHECKING:
    from ...domain.music.entities import Genre, TrackMetadata
    from ...domain.music.value_objects import ParameterSet
    from ..interfaces.parameter_source import ParameterSource
    from ..interfaces.track_provider import TrackProvider
    from .request_serializer import RequestSerializer

logger = logging.getLogger(__name__)


class TrackAcquisitionCoordinator:
    """Issues provider requests, one live task per purpose tag.

    Starting an acquisition cancels the previous one with the same tag.
    Different tags never cancel each other. Results come back as a tagged
    union and cancellation always wins over whatever the provider produced.
    """

    def __init__(
        self,
        *,
        provider: TrackProvider,
        serializer: RequestSerializer,
        parameter_source: ParameterSource | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._provider = provider
        self._serializer = serializer
        self._parameter_source = parameter_source
        self._bus = event_bus or get_event_bus()
        self._tasks: dict[PurposeTag, AcquisitionTask] = {}

    # ── Queries ─────────────────────────────────────────────────────

    def is_in_flight(self, purpose: PurposeTag) -> bool:
        task = self._tasks.get(purpose)
        return task is not None and not task.token.cancelled

    def current_task(self, purpose: PurposeTag) -> AcquisitionTask | None:
        return self._tasks.get(purpose)

    @property
    def in_flight_purposes(self) -> set[PurposeTag]:
        return {purpose for purpose in self._tasks if self.is_in_flight(purpose)}

    def effective_parameters(self, genre: Genre) -> ParameterSet:
        """Parameters for a request targeting *genre*, read right now."""
        source = self._parameter_source
        if source is None:
            return ParameterResolutionService.effective_parameters(
                genre, active_genre_id=None, live_values=None
            )
        return ParameterResolutionService.effective_parameters(
            genre,
            active_genre_id=source.active_genre_id,
            live_values=source.snapshot(),
        )

    # ── Commands ────────────────────────────────────────────────────

    def cancel(self, purpose: PurposeTag, reason: str = "cancelled") -> bool:
        """Cancel the live task for *purpose*, if any."""
        task = self._tasks.get(purpose)
        if task is None:
            return False
        cancelled = task.cancel(reason)
        if cancelled:
            logger.debug(LogTemplates.ACQUISITION_CANCELLED, purpose, task.genre.id, reason)
        return cancelled

    def cancel_all(self, reason: str = "cancelled") -> None:
        for purpose in list(self._tasks):
            self.cancel(purpose, reason)

    async def acquire(
        self,
        genre: Genre,
        purpose: PurposeTag,
        params: ParameterSet | None = None,
    ) -> AcquisitionResult:
        """Acquire a track for *genre* on behalf of *purpose*.

        Args:
            genre: Target genre.
            purpose: Purpose tag; a live task with the same tag is cancelled first.
            params: Explicit parameters. When omitted, the effective
                parameters are read when the request actually dispatches.

        Returns:
            AcquisitionSucceeded, AcquisitionCancelled or AcquisitionFailed.
        """
        previous = self._tasks.get(purpose)
        if previous is not None:
            self.cancel(purpose, f"superseded by newer {purpose} request")

        task = AcquisitionTask(purpose=purpose, genre=genre)
        self._tasks[purpose] = task
        logger.info(LogTemplates.ACQUISITION_STARTED, purpose, genre.id)
        await self._publish_status(task, AcquisitionStatus.LOADING)

        try:
            result = await self._run(task, params)
        except asyncio.CancelledError:
            task.cancel("caller cancelled")
            raise
        finally:
            if self._tasks.get(purpose) is task:
                del self._tasks[purpose]

        await self._publish_result(task, result)
        return result

    async def _run(self, task: AcquisitionTask, params: ParameterSet | None) -> AcquisitionResult:
        async def dispatch() -> TrackMetadata:
            task.token.raise_if_cancelled()
            effective = params if params is not None else self.effective_parameters(task.genre)
            logger.debug(LogTemplates.ACQUISITION_DISPATCHED, task.purpose, task.genre.id, effective.as_dict())
            track = await self._provider.fetch_track(task.genre, task.token, effective)
            if task.token.cancelled:
                # The waiting caller may already have been released.
                await self._discard(task, track)
                raise AcquisitionCancelledError(task.token.reason)
            return track

        try:
            track = await self._serializer.enqueue(dispatch, task.token)
        except AcquisitionError as exc:
            if task.token.cancelled or exc.kind == FailureKind.CANCELLED:
                return self._cancelled(task)
            logger.error(LogTemplates.ACQUISITION_FAILED, task.purpose, task.genre.id, exc.kind, exc.message)
            return AcquisitionFailed(purpose=task.purpose, kind=exc.kind, message=exc.message, error=exc)
        except Exception:
            if task.token.cancelled:
                return self._cancelled(task)
            raise

        if task.token.cancelled:
            await self._discard(task, track)
            return self._cancelled(task)

        logger.info(LogTemplates.ACQUISITION_SUCCEEDED, task.purpose, task.genre.id, track.title)
        return AcquisitionSucceeded(purpose=task.purpose, track=track)

    async def _discard(self, task: AcquisitionTask, track: TrackMetadata) -> None:
        logger.debug(LogTemplates.ACQUISITION_LATE_RESULT_DISCARDED, task.purpose, track.id)
        await self._provider.release(track)

    @staticmethod
    def _cancelled(task: AcquisitionTask) -> AcquisitionCancelled:
        return AcquisitionCancelled(purpose=task.purpose, reason=task.token.reason or "")

    async def _publish_result(self, task: AcquisitionTask, result: AcquisitionResult) -> None:
        if isinstance(result, AcquisitionSucceeded):
            await self._publish_status(task, AcquisitionStatus.READY, track=result.track)
        elif isinstance(result, AcquisitionCancelled):
            await self._publish_status(task, AcquisitionStatus.ABORTED)
        else:
            await self._publish_status(
                task, AcquisitionStatus.FAILED, failure_kind=result.kind, message=result.message
            )

    async def _publish_status(
        self,
        task: AcquisitionTask,
        status: AcquisitionStatus,
        *,
        track: TrackMetadata | None = None,
        failure_kind: FailureKind | None = None,
        message: str = "",
    ) -> None:
        await self._bus.publish(
            AcquisitionStatusChanged(
                purpose=task.purpose,
                genre_id=task.genre.id,
                status=status,
                track_id=track.id if track else None,
                track_title=track.title if track else "",
                failure_kind=failure_kind,
                message=message,
            )
        )
