"""
Music Bounded Context

Genres, parameters, acquired tracks and the playback queue.
"""

from genre_player.domain.music.entities import (
    Genre,
    ParameterSpec,
    PlaybackQueue,
    TrackCandidate,
    TrackMetadata,
)
from genre_player.domain.music.value_objects import ParameterSet, TrackId

__all__ = [
    "Genre",
    "ParameterSet",
    "ParameterSpec",
    "PlaybackQueue",
    "TrackCandidate",
    "TrackId",
    "TrackMetadata",
]
