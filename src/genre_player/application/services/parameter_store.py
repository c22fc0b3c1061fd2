"""Live parameter values owned by the UI and read by the acquisition coordinator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.music.value_objects import ParameterSet
from ...domain.shared.exceptions import InvalidOperationError, ValidationError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ..interfaces.parameter_source import ParameterSource

if TYPE_CHECKING:
    from ...domain.music.entities import Genre, ParameterSpec

logger = logging.getLogger(__name__)


class LiveParameterStore(ParameterSource):
    """Current knob values for the active genre.

    Only base parameters and the additional parameters a listener has
    revealed are sent with requests. Concealing a parameter keeps its value
    so revealing it again restores the previous setting.
    """

    def __init__(self) -> None:
        self._genre: Genre | None = None
        self._values: dict[str, float] = {}
        self._revealed: list[str] = []

    @property
    def genre(self) -> Genre | None:
        return self._genre

    @property
    def active_genre_id(self) -> str | None:
        return self._genre.id if self._genre else None

    @property
    def revealed(self) -> tuple[str, ...]:
        return tuple(self._revealed)

    def activate(self, genre: Genre) -> None:
        """Switch to *genre*, resetting every parameter to its default."""
        self._genre = genre
        self._values = {spec.id: spec.default for spec in genre.parameters}
        self._revealed = []
        logger.debug(LogTemplates.PARAMETERS_RESET, genre.id)

    def clear(self) -> None:
        self._genre = None
        self._values = {}
        self._revealed = []

    def active_parameters(self) -> list[ParameterSpec]:
        genre = self._require_genre("active_parameters")
        revealed = set(self._revealed)
        return list(genre.base_parameters) + [
            spec for spec in genre.additional_parameters if spec.id in revealed
        ]

    def available_parameters(self) -> list[ParameterSpec]:
        """Additional parameters that could still be revealed."""
        genre = self._require_genre("available_parameters")
        revealed = set(self._revealed)
        return [spec for spec in genre.additional_parameters if spec.id not in revealed]

    def value(self, parameter_id: str) -> float:
        self._require_spec(parameter_id)
        return self._values[parameter_id]

    def set_value(self, parameter_id: str, value: float) -> float:
        """Set a parameter, clamped to its range. Returns the stored value."""
        spec = self._require_spec(parameter_id)
        stored = spec.clamp(value)
        self._values[parameter_id] = stored
        return stored

    def reveal(self, parameter_id: str) -> None:
        genre = self._require_genre("reveal")
        if not any(spec.id == parameter_id for spec in genre.additional_parameters):
            raise ValidationError(
                ErrorMessages.NOT_AN_ADDITIONAL_PARAMETER.format(parameter_id=parameter_id),
                field=parameter_id,
            )
        if parameter_id not in self._revealed:
            self._revealed.append(parameter_id)

    def conceal(self, parameter_id: str) -> None:
        if parameter_id in self._revealed:
            self._revealed.remove(parameter_id)

    def snapshot(self) -> ParameterSet:
        if self._genre is None:
            return ParameterSet.empty()
        return ParameterSet({spec.id: self._values[spec.id] for spec in self.active_parameters()})

    def _require_genre(self, operation: str) -> Genre:
        if self._genre is None:
            raise InvalidOperationError(operation, "no active genre")
        return self._genre

    def _require_spec(self, parameter_id: str) -> ParameterSpec:
        spec = self._require_genre("set_value").parameter(parameter_id)
        if spec is None:
            raise ValidationError(
                ErrorMessages.UNKNOWN_PARAMETER.format(parameter_id=parameter_id),
                field=parameter_id,
            )
        return spec
