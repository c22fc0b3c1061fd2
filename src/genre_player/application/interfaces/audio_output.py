"""Port interface for the single shared audio output."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.value_objects import TrackId

PositionCallback = Callable[[float], Awaitable[None]]
DurationCallback = Callable[[float], Awaitable[None]]
SignalCallback = Callable[[], Awaitable[None]]
ErrorCallback = Callable[[str], Awaitable[None]]


class AudioOutput(ABC):
    """Interface for the one playback resource a session owns.

    Only the playback synchronizer issues commands against it. The resource
    reports back through the registered callbacks; every callback receives
    the signal for whatever source is loaded at that moment.
    """

    @property
    @abstractmethod
    def loaded_track_id(self) -> "TrackId | None":
        """Identity of the source currently assigned, if any."""
        ...

    @property
    @abstractmethod
    def position(self) -> float:
        """Actual playback position in seconds."""
        ...

    @property
    @abstractmethod
    def duration(self) -> float | None:
        """Length of the loaded source once known."""
        ...

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """Whether the loaded source can start playing without stalling."""
        ...

    @property
    @abstractmethod
    def is_paused(self) -> bool:
        ...

    @abstractmethod
    async def load(self, track_id: "TrackId", locator: str) -> None:
        """Assign a new source. Readiness is reported via the ready callback."""
        ...

    @abstractmethod
    async def seek(self, position: float) -> None:
        """Assign the playback position in seconds."""
        ...

    @abstractmethod
    async def play(self) -> None:
        """Start or resume playback.

        Raises:
            PlaybackFaultError: If the resource refuses to play.
        """
        ...

    @abstractmethod
    async def pause(self) -> None:
        ...

    @abstractmethod
    async def unload(self) -> None:
        """Drop the current source and stop output."""
        ...

    @abstractmethod
    def set_on_ready_callback(self, callback: SignalCallback) -> None:
        """Set callback for when the loaded source is ready to play."""
        ...

    @abstractmethod
    def set_on_position_changed_callback(self, callback: PositionCallback) -> None:
        ...

    @abstractmethod
    def set_on_duration_known_callback(self, callback: DurationCallback) -> None:
        ...

    @abstractmethod
    def set_on_ended_callback(self, callback: SignalCallback) -> None:
        """Set callback for natural end of the loaded source."""
        ...

    @abstractmethod
    def set_on_error_callback(self, callback: ErrorCallback) -> None:
        """Set callback for load or decode failures."""
        ...
