"""
Unit Tests for the Playback Queue

Tests for:
- set_current on empty, populated and successor-replay queues
- set_next staging and replacement
- advance / retreat boundaries
- reset returning every dropped track
- invariant enforcement
"""

import pytest

from genre_player.domain.music.entities import PlaybackQueue
from genre_player.domain.music.value_objects import TrackId
from genre_player.domain.shared.exceptions import InvalidOperationError


@pytest.fixture
def queue():
    return PlaybackQueue()


class TestSetCurrent:
    def test_empty_queue_becomes_single_entry(self, queue, make_track):
        track = make_track(1)

        assert queue.set_current(track) is True

        assert queue.history == [track]
        assert queue.current_index == 0
        assert queue.current_track == track
        assert not queue.is_empty

    def test_same_track_is_noop(self, queue, make_track):
        track = make_track(1)
        queue.set_current(track)

        assert queue.set_current(track) is False
        assert len(queue) == 1

    def test_new_track_is_appended(self, queue, make_track):
        queue.set_current(make_track(1))
        second = make_track(2)

        queue.set_current(second)

        assert len(queue) == 2
        assert queue.current_index == 1
        assert queue.current_track == second

    def test_successor_is_reused_instead_of_appended(self, queue, make_track):
        first, second = make_track(1), make_track(2)
        queue.set_current(first)
        queue.set_current(second)
        queue.retreat()

        queue.set_current(second)

        assert len(queue) == 2
        assert queue.current_index == 1

    def test_clears_matching_staged_track(self, queue, make_track):
        queue.set_current(make_track(1))
        staged = make_track(2)
        queue.set_next(staged)

        queue.set_current(staged)

        assert queue.next_track is None


class TestSetNext:
    def test_stages_track_without_changing_current(self, queue, make_track):
        current = make_track(1)
        queue.set_current(current)

        assert queue.set_next(make_track(2)) is None

        assert queue.has_next
        assert queue.current_track == current
        assert len(queue) == 1

    def test_overwrite_returns_replaced_track(self, queue, make_track):
        queue.set_current(make_track(1))
        old = make_track(2)
        queue.set_next(old)

        replaced = queue.set_next(make_track(3))

        assert replaced == old
        assert queue.next_track.id == TrackId("fake:3")

    def test_restaging_same_track_returns_none(self, queue, make_track):
        queue.set_current(make_track(1))
        queue.set_next(make_track(2))

        assert queue.set_next(make_track(2)) is None

    def test_clearing_returns_previous(self, queue, make_track):
        staged = make_track(2)
        queue.set_next(staged)

        assert queue.set_next(None) == staged
        assert not queue.has_next


class TestAdvanceAndRetreat:
    def test_advance_consumes_staged_track(self, queue, make_track):
        queue.set_current(make_track(1))
        staged = make_track(2)
        queue.set_next(staged)

        assert queue.advance() == staged

        assert queue.current_index == 1
        assert queue.next_track is None
        assert len(queue) == 2

    def test_advance_replays_successor(self, queue, make_track):
        queue.set_current(make_track(1))
        queue.set_current(make_track(2))
        queue.retreat()

        assert queue.advance().id == TrackId("fake:2")
        assert queue.current_index == 1

    def test_advance_with_nothing_ahead_returns_none(self, queue, make_track):
        queue.set_current(make_track(1))

        assert queue.advance() is None
        assert queue.current_index == 0

    def test_advance_on_empty_queue_returns_none(self, queue):
        assert queue.advance() is None
        assert queue.is_empty

    def test_staged_track_wins_over_successor(self, queue, make_track):
        queue.set_current(make_track(1))
        queue.set_current(make_track(2))
        queue.retreat()
        queue.set_next(make_track(3))

        assert queue.advance().id == TrackId("fake:3")
        assert len(queue) == 3

    def test_retreat_at_first_track_is_noop(self, queue, make_track):
        first = make_track(1)
        queue.set_current(first)

        assert queue.retreat() is None
        assert queue.current_track == first

    def test_retreat_on_empty_queue_is_noop(self, queue):
        assert queue.retreat() is None
        assert queue.current_index == -1

    def test_retreat_keeps_history(self, queue, make_track):
        first = make_track(1)
        queue.set_current(first)
        queue.set_current(make_track(2))

        assert queue.retreat() == first
        assert len(queue) == 2
        assert queue.has_successor
        assert not queue.has_previous


class TestReset:
    def test_returns_history_and_staged(self, queue, make_track):
        queue.set_current(make_track(1))
        queue.set_current(make_track(2))
        queue.set_next(make_track(3))

        dropped = queue.reset()

        assert [str(t.id) for t in dropped] == ["fake:1", "fake:2", "fake:3"]
        assert queue.is_empty
        assert queue.history == []
        assert queue.next_track is None


class TestQueueQueries:
    def test_contains(self, queue, make_track):
        queue.set_current(make_track(1))
        queue.set_next(make_track(2))

        assert queue.contains(TrackId("fake:1"))
        assert queue.contains(TrackId("fake:2"))
        assert not queue.contains(TrackId("fake:3"))

    def test_replace_current_updates_entry(self, queue, make_track):
        queue.set_current(make_track(1, duration=None))

        queue.replace_current(queue.current_track.with_duration(95.0))

        assert queue.current_track.duration_seconds == 95.0

    def test_replace_current_rejects_other_track(self, queue, make_track):
        queue.set_current(make_track(1))

        with pytest.raises(InvalidOperationError):
            queue.replace_current(make_track(2))

    def test_invariant_violation_is_reported(self, queue, make_track):
        queue.set_current(make_track(1))
        queue.current_index = 5

        with pytest.raises(InvalidOperationError) as exc_info:
            queue.retreat()

        assert "outside" in exc_info.value.message


class TestTrackMetadata:
    def test_duration_formatting(self, make_track):
        assert make_track(1, duration=125.4).duration_formatted == "2:05"
        assert make_track(2, duration=3725).duration_formatted == "1:02:05"
        assert make_track(3, duration=None).duration_formatted == "Unknown"

    def test_display_title(self, make_track):
        assert make_track(1, duration=60).display_title == "Lo-Fi Beats #1 [1:00]"
        assert make_track(2, duration=None).display_title == "Lo-Fi Beats #2"

    def test_provider_namespaced_id(self):
        assert TrackId.for_provider("freesound", 12345) == TrackId("freesound:12345")
