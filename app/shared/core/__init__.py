"""
Core utilities package for the Plant Scanner application.
Provides the shared exception hierarchy.
"""

from .exceptions import (
    PlantCareException,
    RepositoryError,
    FileStorageError,
    InvalidImageError,
    UnsupportedFormatError,
    FetchError,
    ExternalAPIError,
    ClassifierAttemptError,
    ClientRequestError,
    ClassificationUnavailableError,
    IdentificationCancelledError,
)

__all__ = [
    "PlantCareException",
    "RepositoryError",
    "FileStorageError",
    "InvalidImageError",
    "UnsupportedFormatError",
    "FetchError",
    "ExternalAPIError",
    "ClassifierAttemptError",
    "ClientRequestError",
    "ClassificationUnavailableError",
    "IdentificationCancelledError",
]
