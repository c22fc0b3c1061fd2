"""MusicGen generation provider: prompt in, audio file out."""

from __future__ import annotations

import asyncio
import logging
import tempfile
from itertools import count
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from genre_player.application.interfaces.track_provider import TrackProvider
from genre_player.config.settings import ProviderSettings
from genre_player.domain.music.catalog import CATEGORY_MOODS
from genre_player.domain.music.entities import Genre, TrackCandidate, TrackMetadata
from genre_player.domain.music.value_objects import ParameterSet, TrackId
from genre_player.domain.shared.cancellation import CancellationToken
from genre_player.domain.shared.datetime_utils import unix_millis
from genre_player.domain.shared.exceptions import ProviderResponseError
from genre_player.domain.shared.messages import ErrorMessages, LogTemplates

from .retry import RetryPolicy, classify_http_error, with_retry

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

MUSICGEN_SOURCE = "musicgen"
PROMPT_SUFFIX = "instrumental background, high quality production"

_CONTENT_SUFFIXES: dict[str, str] = {
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/wave": ".wav",
    "audio/mpeg": ".mp3",
    "audio/ogg": ".ogg",
    "audio/flac": ".flac",
}


def build_prompt(genre: Genre, params: Mapping[str, float] | None = None) -> str:
    """Describe *genre* and its knob values as a text prompt."""
    parts = [f"{genre.label} music"]
    mood = CATEGORY_MOODS.get(genre.category)
    if mood:
        parts.append(mood)
    if params:
        parts.extend(f"{key}: {value:g}" for key, value in params.items())
    parts.append(PROMPT_SUFFIX)
    return ", ".join(parts)


class MusicGenTrackProvider(TrackProvider):
    """Generates a track per request and keeps the audio in a session temp dir.

    Generated files live until :meth:`release` or :meth:`aclose`.
    """

    name = MUSICGEN_SOURCE

    def __init__(
        self,
        settings: ProviderSettings | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
        storage_dir: Path | None = None,
    ) -> None:
        self._settings = settings or ProviderSettings()
        self._retry_policy = retry_policy or RetryPolicy()
        self._client = client
        self._owns_client = client is None
        self._storage_dir = storage_dir
        self._tmp: tempfile.TemporaryDirectory[str] | None = None
        self._files: dict[str, Path] = {}
        self._sequence = count(1)

    @property
    def stored_files(self) -> dict[str, Path]:
        """Generated files still on disk, keyed by native id."""
        return dict(self._files)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        if not self._settings.musicgen_url:
            raise ProviderResponseError(ErrorMessages.MUSICGEN_URL_MISSING)

        self._client = httpx.AsyncClient(timeout=self._settings.timeout_seconds)
        self._owns_client = True
        logger.info(LogTemplates.PROVIDER_CLIENT_INITIALIZED, self.name, self._settings.musicgen_url)
        return self._client

    def _get_storage_dir(self) -> Path:
        if self._storage_dir is None:
            self._tmp = tempfile.TemporaryDirectory(prefix="genre-player-")
            self._storage_dir = Path(self._tmp.name)
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        return self._storage_dir

    async def _generate(self, prompt: str) -> tuple[bytes, str]:
        client = self._get_client()
        try:
            response = await client.get(
                self._settings.musicgen_url,
                params={
                    "prompt": prompt,
                    "temperature": str(self._settings.musicgen_temperature),
                    "seed": str(self._settings.musicgen_seed),
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise classify_http_error(exc, self._retry_policy) from exc

        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if content_type.startswith(("text/", "application/json")):
            raise ProviderResponseError(ErrorMessages.MUSICGEN_NOT_AUDIO.format(content_type=content_type))
        if not response.content:
            raise ProviderResponseError(ErrorMessages.MUSICGEN_EMPTY_AUDIO)
        return response.content, content_type

    async def search(
        self, query: str, token: CancellationToken | None = None
    ) -> list[TrackCandidate]:
        """Generate one candidate for a free-text prompt."""
        audio, content_type = await with_retry(
            lambda: self._generate(query),
            policy=self._retry_policy,
            token=token,
            description="musicgen generation",
        )
        native_id = f"{unix_millis()}-{next(self._sequence)}"
        path = await asyncio.to_thread(self._write_audio, native_id, audio, content_type)
        self._files[native_id] = path
        return [
            TrackCandidate(
                native_id=native_id,
                title="AI Generated",
                duration_seconds=self._settings.musicgen_duration_seconds,
                stream_url=path.as_uri(),
            )
        ]

    def _write_audio(self, native_id: str, audio: bytes, content_type: str) -> Path:
        suffix = _CONTENT_SUFFIXES.get(content_type, ".wav")
        path = self._get_storage_dir() / f"{MUSICGEN_SOURCE}-{native_id}{suffix}"
        path.write_bytes(audio)
        return path

    async def fetch_track(
        self,
        genre: Genre,
        token: CancellationToken | None = None,
        params: ParameterSet | None = None,
    ) -> TrackMetadata:
        prompt = build_prompt(genre, params)
        logger.debug(LogTemplates.MUSICGEN_PROMPT, prompt)
        candidate = (await self.search(prompt, token))[0]

        track = TrackMetadata(
            id=TrackId.for_provider(MUSICGEN_SOURCE, candidate.native_id),
            title=f"AI Generated {genre.label}",
            genre_id=genre.id,
            genre_label=genre.label,
            locator=candidate.stream_url,
            duration_seconds=candidate.duration_seconds,
            source=MUSICGEN_SOURCE,
        )
        logger.info(LogTemplates.MUSICGEN_TRACK_READY, track.id, genre.id)
        return track

    async def release(self, track: TrackMetadata) -> None:
        if track.source != MUSICGEN_SOURCE:
            return
        native_id = str(track.id).removeprefix(f"{MUSICGEN_SOURCE}:")
        path = self._files.pop(native_id, None)
        if path is None:
            return
        await asyncio.to_thread(path.unlink, missing_ok=True)
        logger.debug(LogTemplates.MUSICGEN_FILE_RELEASED, path)

    async def aclose(self) -> None:
        for path in self._files.values():
            path.unlink(missing_ok=True)
        self._files.clear()
        if self._tmp is not None:
            self._tmp.cleanup()
            self._tmp = None
            self._storage_dir = None
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
