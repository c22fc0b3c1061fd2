"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Track providers (Freesound search, MusicGen generation)
- Provider retry and HTTP error classification
"""

from genre_player.infrastructure.provider.freesound_client import FreesoundTrackProvider
from genre_player.infrastructure.provider.musicgen_client import MusicGenTrackProvider

__all__ = [
    "FreesoundTrackProvider",
    "MusicGenTrackProvider",
]
