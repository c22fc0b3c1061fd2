"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Annotated

from pydantic import PlainSerializer, PlainValidator

from genre_player.domain.shared.messages import ErrorMessages


@dataclass(frozen=True)
class TrackId:
    """Provider-unique, opaque track identifier."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError(ErrorMessages.EMPTY_TRACK_ID)

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def for_provider(cls, provider: str, native_id: str | int) -> TrackId:
        """Namespace a provider's native id, e.g. ``freesound:12345``."""
        return cls(f"{provider}:{native_id}")


# Pydantic-compatible type aliases for TrackId fields.
# Serializes as plain string in JSON, stores as TrackId in the model.
TrackIdField = Annotated[
    TrackId,
    PlainValidator(lambda v: TrackId(v) if isinstance(v, str) else v),
    PlainSerializer(lambda v: v.value, return_type=str),
]

OptionalTrackIdField = Annotated[
    TrackId | None,
    PlainValidator(lambda v: TrackId(v) if isinstance(v, str) else v),
    PlainSerializer(lambda v: v.value if v is not None else None, return_type=str | None),
]


@dataclass(frozen=True, eq=False)
class ParameterSet:
    """Read-only mapping of parameter id to numeric value.

    Snapshots are taken from the live store at dispatch time, so later edits
    by the UI never leak into a request that is already executing.
    """

    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "values", MappingProxyType({str(k): float(v) for k, v in self.values.items()})
        )

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __contains__(self, parameter_id: object) -> bool:
        return parameter_id in self.values

    def __getitem__(self, parameter_id: str) -> float:
        return self.values[parameter_id]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParameterSet):
            return dict(self.values) == dict(other.values)
        if isinstance(other, Mapping):
            return dict(self.values) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self.values.items()))

    def get(self, parameter_id: str, default: float | None = None) -> float | None:
        return self.values.get(parameter_id, default)

    def items(self) -> list[tuple[str, float]]:
        return list(self.values.items())

    def as_dict(self) -> dict[str, float]:
        return dict(self.values)

    def with_value(self, parameter_id: str, value: float) -> ParameterSet:
        return ParameterSet({**self.values, parameter_id: value})

    @classmethod
    def empty(cls) -> ParameterSet:
        return cls({})
