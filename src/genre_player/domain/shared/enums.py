"""Shared string enumerations for type-safe comparisons across services."""

from __future__ import annotations

from enum import StrEnum


class PurposeTag(StrEnum):
    """Why an acquisition was requested. Scopes cancellation."""

    EXPLICIT_NEXT = "explicit-next"
    PREFETCH = "prefetch"
    GENRE_SWITCH = "genre-switch"


class AcquisitionStatus(StrEnum):
    """Transient status reported to listeners while acquiring a track."""

    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
    ABORTED = "aborted"


class FailureKind(StrEnum):
    """Error taxonomy for acquisition and playback."""

    CANCELLED = "cancelled"
    NO_RESULTS = "no_results"
    TRANSIENT = "transient"
    PROVIDER = "provider"
    PLAYBACK_FAULT = "playback_fault"


class PrefetchState(StrEnum):
    """Per-track prefetch state."""

    IDLE = "idle"
    TRIGGERED = "triggered"
    READY = "ready"
    FAILED = "failed"


class GenreCategory(StrEnum):
    """Top-level grouping of genres in the catalog."""

    FOCUS = "focus"
    ENERGY = "energy"
    RELAX = "relax"
    MOOD = "mood"
    WORKOUT = "workout"


class ProviderKind(StrEnum):
    """Which track provider backs the session."""

    FREESOUND = "freesound"
    MUSICGEN = "musicgen"


class NextTrackOutcome(StrEnum):
    """Result of a user "next" request."""

    ADVANCED = "advanced"
    PENDING = "pending"
    GENRE_SWITCHING = "genre-switching"
    NO_GENRE = "no-genre"
    ABORTED = "aborted"
    FAILED = "failed"
