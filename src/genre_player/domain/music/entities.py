"""Core domain entities for the music bounded context."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from genre_player.domain.music.value_objects import ParameterSet, TrackId, TrackIdField
from genre_player.domain.shared.datetime_utils import utcnow
from genre_player.domain.shared.enums import GenreCategory
from genre_player.domain.shared.exceptions import InvalidOperationError
from genre_player.domain.shared.messages import ErrorMessages
from genre_player.domain.shared.types import (
    NonEmptyStr,
    SlugStr,
    TempoBpm,
    TrackDurationSeconds,
    TrackTitleStr,
    UtcDatetimeField,
)


class ParameterSpec(BaseModel):
    """A tone-shaping knob a genre exposes, with its range and default."""

    model_config = ConfigDict(frozen=True)

    id: SlugStr
    label: NonEmptyStr
    min_value: float = 0.0
    max_value: float = 100.0
    default: float = 50.0

    @model_validator(mode="after")
    def _check_range(self) -> ParameterSpec:
        if self.min_value > self.max_value:
            raise ValueError(ErrorMessages.INVALID_PARAMETER_RANGE.format(parameter_id=self.id))
        if not self.min_value <= self.default <= self.max_value:
            raise ValueError(ErrorMessages.PARAMETER_DEFAULT_OUT_OF_RANGE.format(parameter_id=self.id))
        return self

    def clamp(self, value: float) -> float:
        return min(self.max_value, max(self.min_value, float(value)))


class Genre(BaseModel):
    """Immutable genre selector; the acquisition key for a session.

    Equality and hashing follow ``id`` only, so a selector rebuilt from the
    catalog compares equal to the one already active.
    """

    model_config = ConfigDict(frozen=True)

    BASE_PARAMETER_COUNT: ClassVar[int] = 3

    id: SlugStr
    label: NonEmptyStr
    category: GenreCategory
    description: str = ""
    parameters: tuple[ParameterSpec, ...] = ()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Genre):
            return self.id == other.id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def base_parameters(self) -> tuple[ParameterSpec, ...]:
        """The first few parameters, used for cross-genre requests."""
        return self.parameters[: self.BASE_PARAMETER_COUNT]

    @property
    def additional_parameters(self) -> tuple[ParameterSpec, ...]:
        return self.parameters[self.BASE_PARAMETER_COUNT :]

    def parameter(self, parameter_id: str) -> ParameterSpec | None:
        for spec in self.parameters:
            if spec.id == parameter_id:
                return spec
        return None

    def default_values(self, *, base_only: bool = False) -> ParameterSet:
        specs = self.base_parameters if base_only else self.parameters
        return ParameterSet({spec.id: spec.default for spec in specs})


class TrackCandidate(BaseModel):
    """One search hit before a track has been chosen."""

    model_config = ConfigDict(frozen=True)

    native_id: NonEmptyStr
    title: TrackTitleStr
    duration_seconds: TrackDurationSeconds | None = None
    stream_url: NonEmptyStr


class TrackMetadata(BaseModel):
    """Immutable description of an acquired, playable track."""

    model_config = ConfigDict(frozen=True)

    id: TrackIdField
    title: TrackTitleStr
    genre_id: SlugStr
    genre_label: NonEmptyStr
    locator: NonEmptyStr
    duration_seconds: TrackDurationSeconds | None = None
    tempo_bpm: TempoBpm | None = None
    source: NonEmptyStr = "unknown"
    acquired_at: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS or HH:MM:SS."""
        if self.duration_seconds is None:
            return "Unknown"

        hours, remainder = divmod(int(round(self.duration_seconds)), 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    @property
    def display_title(self) -> str:
        if self.duration_seconds:
            return f"{self.title} [{self.duration_formatted}]"
        return self.title

    def with_duration(self, duration_seconds: float) -> TrackMetadata:
        """Return a copy whose duration was learned from the loaded resource."""
        return self.model_copy(update={"duration_seconds": duration_seconds})


class PlaybackQueue(BaseModel):
    """History of played tracks, a pointer into it and one staged next track.

    Invariants, checked after every mutation:

    - ``current_index`` is -1 (empty) or a valid index into ``history``.
    - ``history`` is append-only until :meth:`reset`.

    The queue is agnostic to genre. Callers must discard a stale ``next_track``
    from an abandoned genre before staging a new one.
    """

    history: list[TrackMetadata] = Field(default_factory=list)
    current_index: int = -1
    next_track: TrackMetadata | None = None

    # ── Queries ─────────────────────────────────────────────────────

    @property
    def is_empty(self) -> bool:
        return self.current_index == -1

    @property
    def current_track(self) -> TrackMetadata | None:
        if self.current_index == -1:
            return None
        return self.history[self.current_index]

    @property
    def has_next(self) -> bool:
        return self.next_track is not None

    @property
    def has_successor(self) -> bool:
        """True when history already holds a track after the current one."""
        return 0 <= self.current_index < len(self.history) - 1

    @property
    def has_previous(self) -> bool:
        return self.current_index > 0

    def __len__(self) -> int:
        return len(self.history)

    # ── Mutations ───────────────────────────────────────────────────

    def set_current(self, track: TrackMetadata) -> bool:
        """Make *track* current.

        Returns False when *track* already is current and nothing changed.
        """
        current = self.current_track
        if current is not None and current.id == track.id:
            return False

        if self.is_empty:
            self.history = [track]
            self.current_index = 0
        elif self.has_successor and self.history[self.current_index + 1].id == track.id:
            self.current_index += 1
        else:
            self.history.append(track)
            self.current_index = len(self.history) - 1

        if self.next_track is not None and self.next_track.id == track.id:
            self.next_track = None

        self._check_invariants()
        return True

    def set_next(self, track: TrackMetadata | None) -> TrackMetadata | None:
        """Stage (or clear) the pre-fetched slot and return whatever it replaced."""
        replaced = self.next_track
        self.next_track = track
        self._check_invariants()
        if replaced is not None and track is not None and replaced.id == track.id:
            return None
        return replaced

    def advance(self) -> TrackMetadata | None:
        """Move to the next track.

        Consumes the staged next track if present, otherwise replays the
        successor already in history. Returns the new current track, or None
        when there is nowhere to go and a fresh acquisition is needed.
        """
        if self.next_track is not None:
            self.history.append(self.next_track)
            self.current_index = len(self.history) - 1
            self.next_track = None
        elif self.has_successor:
            self.current_index += 1
        else:
            return None

        self._check_invariants()
        return self.current_track

    def retreat(self) -> TrackMetadata | None:
        """Step back one entry in history.

        Returns the new current track, or None at the first track (no-op).
        """
        if not self.has_previous:
            return None
        self.current_index -= 1
        self._check_invariants()
        return self.current_track

    def reset(self) -> list[TrackMetadata]:
        """Clear everything and return the dropped tracks so they can be released."""
        dropped = list(self.history)
        if self.next_track is not None:
            dropped.append(self.next_track)
        self.history = []
        self.current_index = -1
        self.next_track = None
        self._check_invariants()
        return dropped

    def contains(self, track_id: TrackId) -> bool:
        if self.next_track is not None and self.next_track.id == track_id:
            return True
        return any(track.id == track_id for track in self.history)

    def replace_current(self, track: TrackMetadata) -> None:
        """Swap the current entry for an updated copy of the same track."""
        current = self.current_track
        if current is None or current.id != track.id:
            raise InvalidOperationError("replace_current", "mismatched track")
        self.history[self.current_index] = track

    def _check_invariants(self) -> None:
        if not -1 <= self.current_index < len(self.history):
            raise InvalidOperationError(
                "queue_mutation",
                f"index={self.current_index} history={len(self.history)}",
                ErrorMessages.QUEUE_INDEX_OUT_OF_RANGE.format(
                    index=self.current_index, length=len(self.history)
                ),
            )
        if self.current_index == -1 and self.history:
            raise InvalidOperationError(
                "queue_mutation", "detached history", ErrorMessages.QUEUE_DETACHED_HISTORY
            )
