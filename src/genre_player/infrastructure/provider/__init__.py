"""Track providers - Freesound text search and MusicGen generation."""

from genre_player.infrastructure.provider.freesound_client import (
    FreesoundTrackProvider,
    build_genre_query,
    sanitize_query,
)
from genre_player.infrastructure.provider.models import (
    FreesoundAnalysis,
    FreesoundPreviews,
    FreesoundSearchPage,
    FreesoundSound,
)
from genre_player.infrastructure.provider.musicgen_client import MusicGenTrackProvider, build_prompt
from genre_player.infrastructure.provider.retry import RetryPolicy, classify_http_error, with_retry

__all__ = [
    "FreesoundAnalysis",
    "FreesoundPreviews",
    "FreesoundSearchPage",
    "FreesoundSound",
    "FreesoundTrackProvider",
    "MusicGenTrackProvider",
    "RetryPolicy",
    "build_genre_query",
    "build_prompt",
    "classify_http_error",
    "sanitize_query",
    "with_retry",
]
