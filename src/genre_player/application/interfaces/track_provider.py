"""Port interface for remote track providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import Genre, TrackCandidate, TrackMetadata
    from ...domain.music.value_objects import ParameterSet
    from ...domain.shared.cancellation import CancellationToken


class TrackProvider(ABC):
    """Interface for turning a genre into a playable track.

    Implementations classify failures as :class:`AcquisitionError` subclasses
    and must not mutate any shared session state.
    """

    name: str = "provider"

    @abstractmethod
    async def search(
        self, query: str, token: "CancellationToken | None" = None
    ) -> list["TrackCandidate"]:
        """Return a bounded page of candidates for a free-text query."""
        ...

    @abstractmethod
    async def fetch_track(
        self,
        genre: "Genre",
        token: "CancellationToken | None" = None,
        params: "ParameterSet | None" = None,
    ) -> "TrackMetadata":
        """Acquire one playable track for *genre*.

        Raises:
            NoResultsError: The query matched nothing usable.
            TransientProviderError: Retryable faults persisted past the attempt cap.
            ProviderResponseError: The provider rejected the request outright.
            AcquisitionCancelledError: *token* fired during a backoff wait.
        """
        ...

    async def release(self, track: "TrackMetadata") -> None:
        """Free any local resource backing *track*. Streams need nothing."""
        return None

    async def aclose(self) -> None:
        """Close network clients held by the provider."""
        return None
