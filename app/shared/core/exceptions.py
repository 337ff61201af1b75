# 📄 File: app/shared/core/exceptions.py
# 🧭 Purpose (Layman Explanation):
# This file defines the special error types the plant scanner uses to say what went wrong
# (a bad photo, a classifier that is down, a request the classifier refused) in a clear way
# instead of generic error messages.
# 🧪 Purpose (Technical Summary):
# Custom exception hierarchy providing specific error types with HTTP status codes,
# error details, and serialization for API responses and error handling.
# 🔗 Dependencies:
# FastAPI status, typing, HTTP status constants
# 🔄 Connected Modules / Calls From:
# Identification pipeline (normalizer, classifier client, orchestrator), API endpoints,
# exception handlers in app.main

from typing import Any, Dict, Optional
from fastapi import status


class PlantCareException(Exception):
    """
    Base exception class for the application.
    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__.upper()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
                "status_code": self.status_code
            }
        }


# =============================================================================
# INFRASTRUCTURE EXCEPTIONS
# =============================================================================

class RepositoryError(PlantCareException):
    """
    Exception raised when a repository operation fails.
    Used by catalog lookups and scan record writes.
    """

    def __init__(
        self,
        message: str = "Repository operation failed",
        operation: Optional[str] = None,
        table: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table

        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code="REPOSITORY_ERROR"
        )


class FileStorageError(PlantCareException):
    """
    Exception raised for file storage operation failures.
    Used for scan photo upload errors.
    """

    def __init__(
        self,
        message: str = "File storage error",
        operation: Optional[str] = None,
        storage_path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if storage_path:
            details["storage_path"] = storage_path

        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code="FILE_STORAGE_ERROR"
        )


# =============================================================================
# IMAGE INPUT EXCEPTIONS
# =============================================================================

class InvalidImageError(PlantCareException):
    """
    Exception raised when the submitted photo cannot be turned into an image.
    Fatal for the call and never retried.
    """

    user_message = "We could not process your photo. Please try a different image."

    def __init__(
        self,
        message: str = "Invalid image",
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if reason:
            details["reason"] = reason

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code="INVALID_IMAGE"
        )


class UnsupportedFormatError(InvalidImageError):
    """Input is neither a base64 image, an image URL, nor decodable image bytes."""

    def __init__(self, message: str = "Unsupported image format", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, reason="unsupported_format", details=details)
        self.error_code = "UNSUPPORTED_IMAGE_FORMAT"


class FetchError(InvalidImageError):
    """
    Remote image URL could not be downloaded.
    Not retried by the normalizer; retrying is the caller's decision.
    """

    def __init__(
        self,
        message: str = "Failed to fetch image",
        url: Optional[str] = None,
        http_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if url:
            details["url"] = url
        if http_status is not None:
            details["http_status"] = http_status

        super().__init__(message=message, reason="fetch_failed", details=details)
        self.error_code = "IMAGE_FETCH_FAILED"


# =============================================================================
# CLASSIFIER EXCEPTIONS
# =============================================================================

class ExternalAPIError(PlantCareException):
    """
    Exception raised for external API failures.
    Used when the species classifier (PlantNet) fails.
    """

    def __init__(
        self,
        message: str = "External API error",
        api_name: Optional[str] = None,
        api_status_code: Optional[int] = None,
        api_response: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if api_name:
            details["api_name"] = api_name
        if api_status_code:
            details["api_status_code"] = api_status_code
        if api_response:
            details["api_response"] = api_response

        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details,
            error_code="EXTERNAL_API_ERROR"
        )


class ClassifierAttemptError(ExternalAPIError):
    """A single classifier attempt failed in a way that is worth retrying (5xx, network, timeout)."""


class ClientRequestError(ExternalAPIError):
    """Classifier rejected the request with a 4xx status. Never retried."""

    def __init__(
        self,
        message: str = "Classifier rejected the request",
        api_name: Optional[str] = None,
        api_status_code: Optional[int] = None,
        api_response: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            api_name=api_name,
            api_status_code=api_status_code,
            api_response=api_response,
        )
        self.error_code = "CLASSIFIER_REQUEST_REJECTED"


class ClassificationUnavailableError(PlantCareException):
    """
    Exception raised when the classifier cannot produce a result.

    Raised after retries are exhausted, or when the classifier refused the
    request outright (details["retryable"] is False in that case).
    """

    user_message = "Identification service unavailable, please try again."

    def __init__(
        self,
        message: str = "Plant identification service unavailable",
        attempts: Optional[int] = None,
        last_error: Optional[BaseException] = None,
        retryable: bool = True,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        details["retryable"] = retryable
        if attempts is not None:
            details["attempts"] = attempts
        if last_error is not None:
            details["last_error"] = str(last_error)

        self.attempts = attempts
        self.last_error = last_error

        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details,
            error_code="CLASSIFICATION_UNAVAILABLE"
        )


class IdentificationCancelledError(PlantCareException):
    """The caller abandoned the identification before it finished."""

    def __init__(self, message: str = "Identification cancelled", stage: Optional[str] = None):
        details = {"stage": stage} if stage else {}
        super().__init__(
            message=message,
            status_code=499,
            details=details,
            error_code="IDENTIFICATION_CANCELLED"
        )

