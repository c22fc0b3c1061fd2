"""Entry point for embedding the genre player.

The player has no UI of its own. A host application supplies the audio
output and drives the returned session::

    container = create_player(my_audio_output)
    await container.session.select_genre("lofi-beats")
    ...
    await container.shutdown()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from genre_player.config.container import Container, create_container
from genre_player.config.settings import Settings, get_settings
from genre_player.utils.logging import setup_logging

if TYPE_CHECKING:
    from genre_player.application.interfaces.audio_output import AudioOutput

logger = logging.getLogger(__name__)


def create_player(
    audio_output: AudioOutput,
    settings: Settings | None = None,
    *,
    configure_logging: bool = True,
) -> Container:
    """Build a container around *audio_output* with its session started."""
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level, debug=settings.debug)

    container = create_container(settings, audio_output)
    container.initialize()
    logger.info(
        "Genre player ready (environment=%s, provider=%s)",
        settings.environment,
        settings.provider.kind,
    )
    return container
