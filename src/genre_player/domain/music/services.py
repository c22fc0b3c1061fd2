"""
Music Domain Services

Domain services containing business logic that doesn't naturally fit
within a single entity or value object.
"""

from __future__ import annotations

from collections.abc import Mapping

from genre_player.domain.music.entities import Genre, PlaybackQueue
from genre_player.domain.music.value_objects import ParameterSet


class PrefetchPolicy:
    """Rules deciding when the next track should be fetched in the background."""

    DEFAULT_THRESHOLD_SECONDS = 10.0

    def __init__(self, threshold_seconds: float = DEFAULT_THRESHOLD_SECONDS) -> None:
        self.threshold_seconds = threshold_seconds

    @staticmethod
    def remaining_seconds(duration: float | None, position: float) -> float | None:
        if duration is None:
            return None
        return duration - position

    def should_trigger(
        self,
        *,
        duration: float | None,
        position: float,
        queue: PlaybackQueue,
        already_attempted: bool,
        genre_switching: bool,
    ) -> bool:
        """Check whether a prefetch should start right now.

        Args:
            duration: Track length in seconds, or None while still unknown.
            position: Current playback position in seconds.
            queue: The playback queue, consulted for a staged or replayable successor.
            already_attempted: Whether this track already had its one prefetch attempt.
            genre_switching: Whether a genre switch is in progress.

        Returns:
            True if every trigger condition holds.
        """
        if genre_switching or already_attempted:
            return False
        if queue.has_next or queue.has_successor:
            return False
        if duration is None or duration <= self.threshold_seconds:
            return False

        remaining = duration - position
        # Past the end means the ended signal is imminent; the explicit path handles it.
        if remaining <= 0:
            return False
        return remaining <= self.threshold_seconds


class ParameterResolutionService:
    """Decides which parameter values accompany a provider request."""

    @classmethod
    def effective_parameters(
        cls,
        genre: Genre,
        *,
        active_genre_id: str | None,
        live_values: Mapping[str, float] | None,
    ) -> ParameterSet:
        """Resolve the parameters for a request targeting *genre*.

        Live values win when *genre* is the session's active genre. A
        cross-genre request falls back to the genre's base parameters at
        their defaults.
        """
        if active_genre_id == genre.id and live_values is not None:
            return ParameterSet(live_values)
        return genre.default_values(base_only=True)
