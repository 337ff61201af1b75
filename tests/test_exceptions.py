from app.shared.core.exceptions import (
    ClassificationUnavailableError,
    ClientRequestError,
    FetchError,
    InvalidImageError,
    PlantCareException,
    UnsupportedFormatError,
)


class TestExceptionHierarchy:
    def test_image_errors_are_invalid_image(self):
        assert isinstance(UnsupportedFormatError(), InvalidImageError)
        assert isinstance(FetchError(url="https://example.com/a.jpg", http_status=404), InvalidImageError)

    def test_fetch_error_details(self):
        error = FetchError(url="https://example.com/a.jpg", http_status=404)

        assert error.status_code == 400
        assert error.details == {"url": "https://example.com/a.jpg", "http_status": 404, "reason": "fetch_failed"}
        assert error.error_code == "IMAGE_FETCH_FAILED"

    def test_unavailable_details(self):
        cause = ClientRequestError(api_name="PlantNet", api_status_code=401)
        error = ClassificationUnavailableError(attempts=1, last_error=cause, retryable=False)

        assert error.status_code == 503
        assert error.attempts == 1
        assert error.last_error is cause
        assert error.details["retryable"] is False
        assert error.details["last_error"] == "Classifier rejected the request"

    def test_to_dict(self):
        error = PlantCareException("boom", status_code=418, details={"k": "v"}, error_code="TEAPOT")

        assert error.to_dict() == {
            "error": {"code": "TEAPOT", "message": "boom", "details": {"k": "v"}, "status_code": 418}
        }
