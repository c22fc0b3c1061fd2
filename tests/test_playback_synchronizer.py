"""
Unit Tests for PlaybackSynchronizer

Tests for:
- Loading the queue's current track from position zero and auto-playing
- Play state and position reconciliation with a drift tolerance
- Output signals: ready, position, duration, ended, error
- Faults are reported, never retried
"""

import pytest

from genre_player.application.services.playback_synchronizer import PlaybackSynchronizer
from genre_player.domain.music.entities import PlaybackQueue
from genre_player.domain.shared.events import CurrentTrackChanged, PlaybackFaulted, QueueExhausted

from conftest import FakeAudioOutput


@pytest.fixture
def queue():
    return PlaybackQueue()


@pytest.fixture
def synchronizer(audio_output, queue, event_bus):
    return PlaybackSynchronizer(audio_output=audio_output, queue=queue, event_bus=event_bus)


class TestSyncCurrent:
    @pytest.mark.asyncio
    async def test_loads_and_plays_from_start(self, synchronizer, audio_output, queue, recorder, make_track):
        recorder.watch(CurrentTrackChanged)
        changes = []
        synchronizer.add_track_change_listener(changes.append)
        track = make_track(1)
        queue.set_current(track)

        await synchronizer.sync_current()

        assert audio_output.commands == [("load", "fake:1"), ("seek", 0.0), ("play",)]
        assert audio_output.is_playing
        assert synchronizer.desired_playing
        assert changes == [track]
        assert recorder.events[0].track_id == track.id
        assert recorder.events[0].history_index == 0

    @pytest.mark.asyncio
    async def test_same_track_is_not_reloaded(self, synchronizer, audio_output, queue, make_track):
        queue.set_current(make_track(1))
        await synchronizer.sync_current()
        audio_output.commands.clear()

        await synchronizer.sync_current()

        assert audio_output.commands == []

    @pytest.mark.asyncio
    async def test_empty_queue_unloads(self, synchronizer, audio_output, queue, make_track):
        changes = []
        synchronizer.add_track_change_listener(changes.append)
        queue.set_current(make_track(1))
        await synchronizer.sync_current()

        queue.reset()
        await synchronizer.sync_current()

        assert audio_output.loaded_track_id is None
        assert not synchronizer.desired_playing
        assert changes[-1] is None

    @pytest.mark.asyncio
    async def test_plays_once_ready(self, queue, event_bus, make_track):
        output = FakeAudioOutput(auto_ready=False)
        synchronizer = PlaybackSynchronizer(audio_output=output, queue=queue, event_bus=event_bus)
        queue.set_current(make_track(1))

        await synchronizer.sync_current()
        assert "play" not in output.command_names()

        await output.emit_ready()
        assert output.is_playing

    @pytest.mark.asyncio
    async def test_new_track_starts_at_zero_after_seek(self, synchronizer, audio_output, queue, make_track):
        queue.set_current(make_track(1))
        await synchronizer.sync_current()
        await synchronizer.seek(50.0)

        queue.set_current(make_track(2))
        await synchronizer.sync_current()

        assert audio_output.position == 0.0
        assert synchronizer.desired_position == 0.0


class TestPlayState:
    @pytest.mark.asyncio
    async def test_pause_and_resume(self, synchronizer, audio_output, queue, make_track):
        queue.set_current(make_track(1))
        await synchronizer.sync_current()

        await synchronizer.pause()
        assert audio_output.is_paused
        assert not synchronizer.desired_playing

        await synchronizer.play()
        assert audio_output.is_playing

    @pytest.mark.asyncio
    async def test_pause_without_track_is_harmless(self, synchronizer, audio_output):
        await synchronizer.pause()

        assert audio_output.commands == []


class TestPosition:
    @pytest.mark.asyncio
    async def test_seek_beyond_tolerance(self, synchronizer, audio_output, queue, make_track):
        queue.set_current(make_track(1))
        await synchronizer.sync_current()
        audio_output.commands.clear()

        await synchronizer.seek(42.0)

        assert audio_output.commands == [("seek", 42.0)]

    @pytest.mark.asyncio
    async def test_small_drift_is_ignored(self, synchronizer, audio_output, queue, make_track):
        queue.set_current(make_track(1))
        await synchronizer.sync_current()
        await audio_output.emit_position(10.0)
        audio_output.commands.clear()

        await synchronizer.seek(10.1)

        assert audio_output.commands == []

    @pytest.mark.asyncio
    async def test_position_listeners(self, synchronizer, audio_output, queue, make_track):
        seen = []
        synchronizer.add_position_listener(lambda position, duration: seen.append((position, duration)))
        queue.set_current(make_track(1, duration=40.0))
        await synchronizer.sync_current()

        await audio_output.emit_position(12.5)

        assert seen == [(12.5, 40.0)]
        assert synchronizer.desired_position == 12.5

    @pytest.mark.asyncio
    async def test_duration_learned_from_output(self, synchronizer, audio_output, queue, make_track):
        queue.set_current(make_track(1, duration=None))
        await synchronizer.sync_current()

        await audio_output.emit_duration(133.0)

        assert queue.current_track.duration_seconds == 133.0
        assert synchronizer.duration == 133.0


class TestEnded:
    @pytest.mark.asyncio
    async def test_advances_to_staged_track(self, synchronizer, audio_output, queue, make_track):
        queue.set_current(make_track(1))
        await synchronizer.sync_current()
        queue.set_next(make_track(2))

        await audio_output.emit_ended()

        assert audio_output.loaded() == "fake:2"
        assert audio_output.is_playing
        assert queue.current_index == 1

    @pytest.mark.asyncio
    async def test_exhausted_queue_is_reported(self, synchronizer, audio_output, queue, recorder, make_track):
        recorder.watch(QueueExhausted)
        queue.set_current(make_track(1))
        await synchronizer.sync_current()

        await audio_output.emit_ended()

        assert not synchronizer.desired_playing
        assert len(recorder.events) == 1
        assert recorder.events[0].genre_id == "lofi-beats"
        assert str(recorder.events[0].last_track_id) == "fake:1"

    @pytest.mark.asyncio
    async def test_stale_ended_signal_is_ignored(self, synchronizer, audio_output, queue, recorder, make_track):
        recorder.watch(QueueExhausted)
        queue.set_current(make_track(1))
        await synchronizer.sync_current()
        queue.set_current(make_track(2))

        await audio_output.emit_ended()

        assert recorder.events == []
        assert queue.current_index == 1


class TestFaults:
    @pytest.mark.asyncio
    async def test_output_error_is_reported_once(self, synchronizer, audio_output, queue, recorder, make_track):
        recorder.watch(PlaybackFaulted)
        queue.set_current(make_track(1))
        await synchronizer.sync_current()
        load_count = audio_output.command_names().count("load")

        await audio_output.emit_error("decode failed")

        assert len(recorder.events) == 1
        assert recorder.events[0].message == "decode failed"
        assert not synchronizer.desired_playing
        assert audio_output.command_names().count("load") == load_count

    @pytest.mark.asyncio
    async def test_play_refusal_is_reported(self, synchronizer, audio_output, queue, recorder, make_track):
        recorder.watch(PlaybackFaulted)
        audio_output.fail_play = "autoplay blocked"
        queue.set_current(make_track(1))

        await synchronizer.sync_current()

        assert recorder.events[0].message == "autoplay blocked"
        assert str(recorder.events[0].track_id) == "fake:1"
        assert not synchronizer.desired_playing
