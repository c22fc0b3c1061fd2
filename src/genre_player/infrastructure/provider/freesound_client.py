"""Freesound text-search provider with retry and random pick."""

from __future__ import annotations

import logging
import random
import re
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from genre_player.application.interfaces.track_provider import TrackProvider
from genre_player.config.settings import ProviderSettings
from genre_player.domain.music.entities import Genre, TrackCandidate, TrackMetadata
from genre_player.domain.music.value_objects import ParameterSet, TrackId
from genre_player.domain.shared.cancellation import CancellationToken
from genre_player.domain.shared.exceptions import (
    AcquisitionError,
    NoResultsError,
    ProviderResponseError,
)
from genre_player.domain.shared.messages import ErrorMessages, LogTemplates

from .models import FreesoundAnalysis, FreesoundSearchPage, FreesoundSound
from .retry import RetryPolicy, classify_http_error, with_retry

logger = logging.getLogger(__name__)

FREESOUND_SOURCE = "freesound"
TEMPO_DESCRIPTOR = "rhythm.bpm"

_QUERY_SPECIAL_CHARS = re.compile(r"[\[\]:]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_query(value: str) -> str:
    """Strip characters the search syntax treats as operators."""
    return _WHITESPACE.sub(" ", _QUERY_SPECIAL_CHARS.sub(" ", value)).strip()


def build_genre_query(genre: Genre) -> str:
    return sanitize_query(f"{genre.label} music")


class FreesoundTrackProvider(TrackProvider):
    """Searches Freesound for a genre and picks one result uniformly at random.

    Repeated requests for the same genre therefore vary. A tempo estimate is
    looked up afterwards on a best-effort basis; its failure never fails the
    track.
    """

    name = FREESOUND_SOURCE

    def __init__(
        self,
        settings: ProviderSettings | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings or ProviderSettings()
        self._retry_policy = retry_policy or RetryPolicy()
        self._client = client
        self._owns_client = client is None
        self._rng = rng or random.Random()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client

        headers = {"Accept": "application/json"}
        api_key = self._settings.api_key.get_secret_value()
        if api_key:
            headers["Authorization"] = f"Token {api_key}"
        else:
            logger.warning(LogTemplates.PROVIDER_NO_API_KEY, self.name)

        self._client = httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout_seconds,
            headers=headers,
        )
        self._owns_client = True
        logger.info(LogTemplates.PROVIDER_CLIENT_INITIALIZED, self.name, self._settings.base_url)
        return self._client

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        client = self._get_client()
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise classify_http_error(exc, self._retry_policy) from exc

        try:
            return response.json()
        except ValueError as exc:
            preview = response.text[:200]
            logger.error(LogTemplates.PROVIDER_NON_JSON_BODY, path, preview)
            raise ProviderResponseError(ErrorMessages.PROVIDER_NON_JSON) from exc

    def _search_params(self, query: str) -> dict[str, Any]:
        return {
            "query": query,
            "fields": self._settings.search_fields,
            "filter": self._settings.duration_filter,
            "page_size": self._settings.page_size,
            "sort": self._settings.sort,
        }

    async def search(
        self, query: str, token: CancellationToken | None = None
    ) -> list[TrackCandidate]:
        """Search for playable candidates.

        Raises:
            NoResultsError: The response has no usable ``results``.
            ProviderResponseError: The body is not a JSON object or the page is malformed.
            TransientProviderError: Retryable faults outlasted the attempt cap.
        """
        query = sanitize_query(query)
        payload = await with_retry(
            lambda: self._get_json(self._settings.search_path, self._search_params(query)),
            policy=self._retry_policy,
            token=token,
            description=f"search '{query}'",
        )
        sounds = self._parse_results(payload, query)

        candidates: list[TrackCandidate] = []
        for sound in sounds:
            candidate = sound.to_candidate()
            if candidate is None:
                logger.debug(LogTemplates.PROVIDER_SKIPPED_NO_PREVIEW, sound.id)
                continue
            candidates.append(candidate)

        if not candidates:
            raise NoResultsError(query, ErrorMessages.NO_PLAYABLE_PREVIEWS.format(query=query))
        logger.debug(LogTemplates.PROVIDER_SEARCH_RESULTS, query, len(candidates))
        return candidates

    @staticmethod
    def _parse_results(payload: Any, query: str) -> list[FreesoundSound]:
        if not isinstance(payload, dict):
            raise ProviderResponseError(ErrorMessages.PROVIDER_MALFORMED_RESPONSE)
        if not isinstance(payload.get("results"), list):
            raise NoResultsError(query)

        try:
            page = FreesoundSearchPage.model_validate(payload)
        except PydanticValidationError as exc:
            raise ProviderResponseError(ErrorMessages.PROVIDER_MALFORMED_PAGE) from exc
        sounds: list[FreesoundSound] = []
        for raw in page.results:
            try:
                sounds.append(FreesoundSound.model_validate(raw))
            except PydanticValidationError:
                logger.debug(LogTemplates.PROVIDER_SKIPPED_INVALID_RESULT, raw.get("id"))
        if not sounds:
            raise NoResultsError(query)
        return sounds

    async def fetch_track(
        self,
        genre: Genre,
        token: CancellationToken | None = None,
        params: ParameterSet | None = None,
    ) -> TrackMetadata:
        query = build_genre_query(genre)
        if params:
            # Text search has no knob for tone parameters; they only matter for generation.
            logger.debug(LogTemplates.PROVIDER_PARAMS_IGNORED, self.name, params.as_dict())

        candidates = await self.search(query, token)
        chosen = self._rng.choice(candidates)
        tempo = await self._lookup_tempo(chosen.native_id) if self._settings.tempo_lookup else None

        track = TrackMetadata(
            id=TrackId.for_provider(FREESOUND_SOURCE, chosen.native_id),
            title=chosen.title,
            genre_id=genre.id,
            genre_label=genre.label,
            locator=chosen.stream_url,
            duration_seconds=chosen.duration_seconds,
            tempo_bpm=tempo,
            source=FREESOUND_SOURCE,
        )
        logger.info(LogTemplates.PROVIDER_TRACK_PICKED, track.title, len(candidates), genre.id)
        return track

    async def _lookup_tempo(self, native_id: str) -> float | None:
        """Single best-effort request for a tempo estimate."""
        try:
            payload = await self._get_json(
                f"/sounds/{native_id}/analysis/", {"descriptors": TEMPO_DESCRIPTOR}
            )
            if not isinstance(payload, dict):
                return None
            return FreesoundAnalysis.model_validate(payload).tempo_bpm
        except (AcquisitionError, PydanticValidationError) as exc:
            logger.debug(LogTemplates.PROVIDER_TEMPO_UNAVAILABLE, native_id, exc)
            return None

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
