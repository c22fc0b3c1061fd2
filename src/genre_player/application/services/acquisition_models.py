"""DTOs for the acquisition coordinator and player session."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from ...domain.music.entities import Genre, TrackMetadata
from ...domain.shared.cancellation import CancellationToken
from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.enums import FailureKind, NextTrackOutcome, PurposeTag
from ...domain.shared.exceptions import AcquisitionError


class AcquisitionSucceeded(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: Literal["succeeded"] = "succeeded"
    purpose: PurposeTag
    track: TrackMetadata


class AcquisitionCancelled(BaseModel):
    """The task was superseded. Callers drop it silently."""

    model_config = ConfigDict(frozen=True)

    outcome: Literal["cancelled"] = "cancelled"
    purpose: PurposeTag
    reason: str = ""


class AcquisitionFailed(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    outcome: Literal["failed"] = "failed"
    purpose: PurposeTag
    kind: FailureKind
    message: str
    error: AcquisitionError | None = None


AcquisitionResult = AcquisitionSucceeded | AcquisitionCancelled | AcquisitionFailed


@dataclass
class AcquisitionTask:
    """One live acquisition; at most one exists per purpose tag."""

    purpose: PurposeTag
    genre: Genre
    token: CancellationToken = field(default_factory=CancellationToken)
    created_at: datetime = field(default_factory=utcnow)

    def cancel(self, reason: str) -> bool:
        return self.token.cancel(reason)


class NextTrackResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: NextTrackOutcome
    track: TrackMetadata | None = None
    message: str = ""

    @property
    def advanced(self) -> bool:
        return self.outcome == NextTrackOutcome.ADVANCED


class GenreSelectionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    genre_id: str
    changed: bool
    track: TrackMetadata | None = None
    result: AcquisitionResult | None = None
