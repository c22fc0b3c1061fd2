"""Base exception classes for domain-level errors."""

from __future__ import annotations

from genre_player.domain.shared.enums import FailureKind


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class EntityNotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, identifier: str | int, message: str | None = None) -> None:
        msg = message or f"{entity_type} with id '{identifier}' not found"
        super().__init__(msg, code="ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


# === Acquisition errors ===


class AcquisitionError(DomainError):
    """Base class for failures while obtaining a playable track.

    Every subclass carries a :class:`FailureKind` so callers can branch on
    the category without inspecting exception types.
    """

    kind: FailureKind = FailureKind.PROVIDER

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message, code=code or self.kind.value.upper())


class AcquisitionCancelledError(AcquisitionError):
    """The operation was superseded; never shown to the user."""

    kind = FailureKind.CANCELLED

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(f"Acquisition cancelled: {reason or 'superseded'}")
        self.reason = reason


class NoResultsError(AcquisitionError):
    """The provider query produced nothing usable. Permanent."""

    kind = FailureKind.NO_RESULTS

    def __init__(self, query: str, message: str | None = None) -> None:
        super().__init__(message or f"No tracks found for '{query}'")
        self.query = query


class TransientProviderError(AcquisitionError):
    """A retryable transport fault (timeout, rate limit, server error)."""

    kind = FailureKind.TRANSIENT

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        attempts: int = 1,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.attempts = attempts


class ProviderResponseError(AcquisitionError):
    """The provider answered with a non-retryable status or a malformed body."""

    kind = FailureKind.PROVIDER

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PlaybackFaultError(DomainError):
    """The audio output failed to load or play a resource."""

    kind = FailureKind.PLAYBACK_FAULT

    def __init__(self, message: str, track_id: str | None = None) -> None:
        super().__init__(message, code="PLAYBACK_FAULT")
        self.track_id = track_id
