"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from genre_player.application.interfaces.audio_output import AudioOutput
from genre_player.application.interfaces.parameter_source import ParameterSource
from genre_player.application.interfaces.track_provider import TrackProvider

__all__ = [
    "AudioOutput",
    "ParameterSource",
    "TrackProvider",
]
