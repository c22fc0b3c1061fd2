"""Single-flight execution queue for provider calls.

At most one submitted job runs at a time across the whole process, in
strict submission order. Callers waiting on a cancelled token are released
immediately; a job that is already running is never interrupted, its late
result is simply dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Generic, TypeVar

from ...domain.shared.cancellation import CancellationToken
from ...domain.shared.exceptions import AcquisitionCancelledError, InvalidOperationError
from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

T = TypeVar("T")

_job_ids = count(1)


def _consume_outcome(future: asyncio.Future[Any]) -> None:
    # Retrieve the exception so an abandoned job does not log "never retrieved".
    if not future.cancelled():
        future.exception()


@dataclass(eq=False)
class _Job(Generic[T]):
    work: Callable[[], Awaitable[T]]
    token: CancellationToken | None
    future: asyncio.Future[T]
    job_id: int = field(default_factory=lambda: next(_job_ids))
    abandoned: bool = False


class RequestSerializer:
    """FIFO queue that runs submitted coroutines one at a time."""

    def __init__(self) -> None:
        self._pending: deque[_Job[Any]] = deque()
        self._wakeup = asyncio.Event()
        self._worker: asyncio.Task[None] | None = None
        self._active: _Job[Any] | None = None
        self._closed = False
        self._executed = 0
        self._skipped = 0

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def is_busy(self) -> bool:
        return self._active is not None

    @property
    def executed_count(self) -> int:
        """Number of jobs whose work was actually started."""
        return self._executed

    @property
    def skipped_count(self) -> int:
        return self._skipped

    @property
    def closed(self) -> bool:
        return self._closed

    async def enqueue(
        self,
        work: Callable[[], Awaitable[T]],
        token: CancellationToken | None = None,
    ) -> T:
        """Run *work* once every earlier job has settled.

        Returns:
            Whatever *work* returns.

        Raises:
            AcquisitionCancelledError: If *token* fires before the result is
                available to the caller. A running job keeps running and its
                outcome is discarded.
            InvalidOperationError: If the serializer has been closed.
        """
        if self._closed:
            raise InvalidOperationError("enqueue", "closed")
        if token is not None:
            token.raise_if_cancelled()

        loop = asyncio.get_running_loop()
        job: _Job[T] = _Job(work=work, token=token, future=loop.create_future())
        self._pending.append(job)
        self._ensure_worker()
        self._wakeup.set()
        logger.debug(LogTemplates.SERIALIZER_ENQUEUED, job.job_id, len(self._pending))

        waiter: asyncio.Task[None] | None = None
        try:
            if token is None:
                return await asyncio.shield(job.future)

            waiter = asyncio.create_task(token.wait())
            await asyncio.wait({job.future, waiter}, return_when=asyncio.FIRST_COMPLETED)
            if token.cancelled:
                self._abandon(job)
                raise AcquisitionCancelledError(token.reason)
            return job.future.result()
        except asyncio.CancelledError:
            self._abandon(job)
            raise
        finally:
            if waiter is not None and not waiter.done():
                waiter.cancel()

    def _abandon(self, job: _Job[Any]) -> None:
        if job.abandoned:
            return
        job.abandoned = True
        try:
            self._pending.remove(job)
        except ValueError:
            # Already running or finished; drop whatever it produces.
            if job.future.done():
                _consume_outcome(job.future)
            else:
                job.future.add_done_callback(_consume_outcome)
            logger.debug(LogTemplates.SERIALIZER_RESULT_DISCARDED, job.job_id)
        else:
            self._skipped += 1
            job.future.cancel()
            logger.debug(LogTemplates.SERIALIZER_JOB_WITHDRAWN, job.job_id)

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="request-serializer")

    async def _run(self) -> None:
        while not self._closed:
            if not self._pending:
                self._wakeup.clear()
                await self._wakeup.wait()
                continue

            job = self._pending.popleft()
            if job.future.done():
                continue
            if job.token is not None and job.token.cancelled:
                self._skipped += 1
                job.future.set_exception(AcquisitionCancelledError(job.token.reason))
                _consume_outcome(job.future)
                logger.debug(LogTemplates.SERIALIZER_JOB_SKIPPED, job.job_id)
                continue

            await self._execute(job)

    async def _execute(self, job: _Job[Any]) -> None:
        self._active = job
        self._executed += 1
        logger.debug(LogTemplates.SERIALIZER_JOB_STARTED, job.job_id, len(self._pending))
        try:
            result = await job.work()
        except asyncio.CancelledError:
            if not job.future.done():
                job.future.set_exception(AcquisitionCancelledError("serializer closed"))
                _consume_outcome(job.future)
            raise
        except Exception as exc:
            if not job.future.done():
                job.future.set_exception(exc)
        else:
            if not job.future.done():
                job.future.set_result(result)
        finally:
            self._active = None

    async def aclose(self) -> None:
        """Stop the worker and release every waiting caller as cancelled."""
        if self._closed:
            return
        self._closed = True

        while self._pending:
            job = self._pending.popleft()
            if not job.future.done():
                job.future.set_exception(AcquisitionCancelledError("serializer closed"))
                _consume_outcome(job.future)

        worker, self._worker = self._worker, None
        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        logger.debug(LogTemplates.SERIALIZER_CLOSED)
