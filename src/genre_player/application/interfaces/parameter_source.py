"""Port interface for the UI-owned parameter values."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.value_objects import ParameterSet


class ParameterSource(ABC):
    """Read-only view of the live tone-shaping parameters."""

    @property
    @abstractmethod
    def active_genre_id(self) -> str | None:
        """Genre whose parameters are currently on screen, if any."""
        ...

    @abstractmethod
    def snapshot(self) -> "ParameterSet":
        """The active parameter values as of this instant."""
        ...
