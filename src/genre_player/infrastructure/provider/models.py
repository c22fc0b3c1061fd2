"""Wire models for the Freesound API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ...domain.music.entities import TrackCandidate


class FreesoundPreviews(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    hq_mp3: str | None = Field(default=None, alias="preview-hq-mp3")
    hq_ogg: str | None = Field(default=None, alias="preview-hq-ogg")
    lq_mp3: str | None = Field(default=None, alias="preview-lq-mp3")
    lq_ogg: str | None = Field(default=None, alias="preview-lq-ogg")

    def best_url(self) -> str | None:
        """Pick the highest-quality preview that is present."""
        for url in (self.hq_mp3, self.hq_ogg, self.lq_mp3, self.lq_ogg):
            if url:
                return url
        return None


class FreesoundSound(BaseModel):
    """One entry in a text-search ``results`` array."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = Field(..., min_length=1)
    duration: float | None = Field(default=None, ge=0.0)
    previews: FreesoundPreviews = Field(default_factory=FreesoundPreviews)

    def to_candidate(self) -> TrackCandidate | None:
        url = self.previews.best_url()
        if url is None:
            return None
        return TrackCandidate(
            native_id=str(self.id),
            title=self.name[:500],
            duration_seconds=round(self.duration) if self.duration is not None else None,
            stream_url=url,
        )


class FreesoundSearchPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    count: int | None = None
    next: str | None = None
    results: list[dict[str, Any]] = Field(default_factory=list)


class FreesoundRhythm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bpm: float | None = None


class FreesoundAnalysis(BaseModel):
    """Subset of ``/sounds/<id>/analysis/`` used for tempo."""

    model_config = ConfigDict(extra="ignore")

    rhythm: FreesoundRhythm = Field(default_factory=FreesoundRhythm)

    @property
    def tempo_bpm(self) -> float | None:
        bpm = self.rhythm.bpm
        if bpm is None or bpm <= 0 or bpm > 400:
            return None
        return round(bpm, 1)
