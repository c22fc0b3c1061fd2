"""
Shared Domain Kernel

Contains exceptions, enums and cancellation primitives shared across the package.
"""

from genre_player.domain.shared.cancellation import CancellationToken
from genre_player.domain.shared.exceptions import (
    AcquisitionCancelledError,
    AcquisitionError,
    DomainError,
    EntityNotFoundError,
    InvalidOperationError,
    NoResultsError,
    PlaybackFaultError,
    ProviderResponseError,
    TransientProviderError,
    ValidationError,
)

__all__ = [
    "AcquisitionCancelledError",
    "AcquisitionError",
    "CancellationToken",
    "DomainError",
    "EntityNotFoundError",
    "InvalidOperationError",
    "NoResultsError",
    "PlaybackFaultError",
    "ProviderResponseError",
    "TransientProviderError",
    "ValidationError",
]
