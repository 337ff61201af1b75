"""HTTP surface: routes, envelopes and error mapping."""
import base64

import httpx
import pytest

from app.main import create_application
from app.modules.plant_identification.infrastructure.service_factory import create_identification_service
from tests.conftest import plantnet_body, seed_species

MONSTERA_BODY = plantnet_body(("Monstera deliciosa", 0.92, ["Split-leaf philodendron"]))
BLURRY_BODY = plantnet_body(("Ficus lyrata", 0.3, []))


def data_uri(data: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(data).decode()


@pytest.fixture
async def api(settings, db_manager, fake_classifier):
    """Factory: await api([(status, body), ...]) -> (httpx client, fake classifier)."""
    opened = []

    async def factory(responses):
        classifier = await fake_classifier(responses)
        configured = settings.model_copy(update={"PLANTNET_API_URL": classifier.url})
        service = create_identification_service(configured, db_manager.session_factory)
        await service.startup()

        app = create_application(settings)
        app.state.db_manager = db_manager
        app.state.identification_service = service

        client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")
        opened.append((client, service))
        return client, classifier

    yield factory

    for client, service in opened:
        await client.aclose()
        await service.shutdown()


class TestIdentifyEndpoints:
    async def test_identify_data_uri(self, api, session_factory, jpeg_bytes):
        await seed_species(session_factory, scientific_name="Monstera deliciosa", common_name="Swiss Cheese Plant")
        client, _ = await api([(200, MONSTERA_BODY)])

        response = await client.post("/api/v1/identify", json={"image": data_uri(jpeg_bytes), "user_id": "u1"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert "error" not in body
        assert body["data"]["threshold_met"] is True
        assert body["data"]["top_suggestion"]["common_name"] == "Swiss Cheese Plant"
        assert body["data"]["scan_id"]

    async def test_low_confidence_envelope(self, api, jpeg_bytes):
        client, _ = await api([(200, BLURRY_BODY)])

        response = await client.post("/api/v1/identify", json={"image": data_uri(jpeg_bytes)})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "LOW_CONFIDENCE"
        assert body["data"]["confidence"] == 0.3

    async def test_upload(self, api, jpeg_bytes):
        client, classifier = await api([(200, MONSTERA_BODY)])

        response = await client.post(
            "/api/v1/identify/upload",
            files={"file": ("plant.jpg", jpeg_bytes, "image/jpeg")},
            data={"user_id": "u1", "organ": "flower"},
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert classifier.requests[0]["organs"] == "flower"

    async def test_retry_calls_classifier_again(self, api, jpeg_bytes):
        client, classifier = await api([(200, MONSTERA_BODY)])
        payload = {"image": data_uri(jpeg_bytes)}

        await client.post("/api/v1/identify", json=payload)
        await client.post("/api/v1/identify", json=payload)
        response = await client.post("/api/v1/identify/retry", json=payload)

        assert response.status_code == 200
        assert classifier.calls == 2

    async def test_clear_cache(self, api, jpeg_bytes):
        client, _ = await api([(200, MONSTERA_BODY)])
        payload = {"image": data_uri(jpeg_bytes)}
        await client.post("/api/v1/identify", json=payload)

        first = await client.request("DELETE", "/api/v1/identify/cache", json=payload)
        second = await client.request("DELETE", "/api/v1/identify/cache", json=payload)

        assert first.json() == {"success": True, "cleared": True}
        assert second.json() == {"success": True, "cleared": False}

    async def test_stats(self, api, jpeg_bytes):
        client, _ = await api([(200, MONSTERA_BODY)])
        await client.post("/api/v1/identify", json={"image": data_uri(jpeg_bytes)})

        response = await client.get("/api/v1/identify/stats")

        assert response.status_code == 200
        assert response.json()["data"]["outcomes"]["accepted"] == 1


class TestErrorMapping:
    async def test_invalid_image(self, api):
        client, classifier = await api([(200, MONSTERA_BODY)])

        response = await client.post("/api/v1/identify", json={"image": "not an image at all"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "UNSUPPORTED_IMAGE_FORMAT"
        assert body["details"]["reason"] == "unsupported_format"
        assert classifier.calls == 0

    async def test_blank_image_rejected_by_validation(self, api):
        client, _ = await api([(200, MONSTERA_BODY)])

        response = await client.post("/api/v1/identify", json={"image": "   "})

        assert response.status_code == 422

    async def test_classifier_down(self, api, jpeg_bytes):
        client, classifier = await api([(503, {"message": "busy"})])

        response = await client.post("/api/v1/identify", json={"image": data_uri(jpeg_bytes)})

        assert response.status_code == 503
        body = response.json()
        assert body["error_code"] == "CLASSIFICATION_UNAVAILABLE"
        assert body["details"]["retryable"] is True
        assert classifier.calls == 3

    async def test_service_not_initialized(self, settings):
        app = create_application(settings)
        app.state.identification_service = None

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
            response = await client.post("/api/v1/identify", json={"image": "data:image/jpeg;base64,AAAA"})

        assert response.status_code == 503


class TestHealth:
    async def test_liveness(self, api):
        client, _ = await api([(200, MONSTERA_BODY)])

        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_readiness(self, api):
        client, _ = await api([(200, MONSTERA_BODY)])

        response = await client.get("/api/v1/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"]["identification_service"] == "ready"

    async def test_api_info(self, api):
        client, _ = await api([(200, MONSTERA_BODY)])

        response = await client.get("/api/v1/")

        assert response.status_code == 200
