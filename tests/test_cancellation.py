"""Tests for CancellationToken."""

import asyncio

import pytest

from genre_player.domain.shared.cancellation import CancellationToken
from genre_player.domain.shared.exceptions import AcquisitionCancelledError


class TestCancellationToken:
    def test_starts_live(self):
        token = CancellationToken()

        assert not token.cancelled
        assert token.reason is None
        token.raise_if_cancelled()

    def test_first_reason_wins(self):
        token = CancellationToken()

        assert token.cancel("superseded") is True
        assert token.cancel("later") is False

        assert token.cancelled
        assert token.reason == "superseded"

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.cancel("genre switch")

        with pytest.raises(AcquisitionCancelledError) as exc_info:
            token.raise_if_cancelled()

        assert exc_info.value.reason == "genre switch"

    def test_callbacks_run_once(self):
        token = CancellationToken()
        seen = []
        token.add_callback(lambda t: seen.append(t.reason))

        token.cancel("a")
        token.cancel("b")

        assert seen == ["a"]

    def test_callback_added_after_cancel_runs_immediately(self):
        token = CancellationToken()
        token.cancel("done")
        seen = []

        token.add_callback(lambda t: seen.append(t.reason))

        assert seen == ["done"]

    def test_failing_callback_does_not_stop_others(self):
        token = CancellationToken()
        seen = []

        def boom(_):
            raise RuntimeError("boom")

        token.add_callback(boom)
        token.add_callback(lambda t: seen.append("ok"))
        token.cancel()

        assert seen == ["ok"]

    def test_removed_callback_is_not_called(self):
        token = CancellationToken()
        seen = []

        def callback(t):
            seen.append(t)

        token.add_callback(callback)
        token.remove_callback(callback)
        token.cancel()

        assert seen == []


class TestTokenWaits:
    @pytest.mark.asyncio
    async def test_sleep_completes_when_live(self):
        token = CancellationToken()

        await token.sleep(0.01)

        assert not token.cancelled

    @pytest.mark.asyncio
    async def test_sleep_aborts_on_cancel(self):
        token = CancellationToken()
        loop = asyncio.get_running_loop()
        loop.call_later(0.01, token.cancel, "stop")
        started = loop.time()

        with pytest.raises(AcquisitionCancelledError):
            await token.sleep(5.0)

        assert loop.time() - started < 1.0

    @pytest.mark.asyncio
    async def test_sleep_on_cancelled_token_raises_immediately(self):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(AcquisitionCancelledError):
            await token.sleep(5.0)

    @pytest.mark.asyncio
    async def test_wait_returns_after_cancel(self):
        token = CancellationToken()
        waiter = asyncio.create_task(token.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        token.cancel()
        await asyncio.wait_for(waiter, timeout=1.0)
