import asyncio
import io
import json
from typing import Any, List, Tuple, Union

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from PIL import Image

from app.modules.plant_identification.infrastructure.database import models  # noqa: F401
from app.shared.config.settings import Settings
from app.shared.infrastructure.database.connection import DatabaseConnectionManager

# (status, body) or (status, body, delay_seconds)
ScriptedResponse = Union[Tuple[int, Union[dict, str]], Tuple[int, Union[dict, str], float]]


def make_image_bytes(size=(64, 48), color=(34, 139, 34), fmt="JPEG") -> bytes:
    """A solid-colour test photo."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def plantnet_body(*results: Tuple[str, float, List[str]]) -> dict:
    """PlantNet-shaped JSON body from (scientific_name, score, common_names) tuples."""
    return {
        "query": {"organs": ["leaf"]},
        "results": [
            {
                "score": score,
                "species": {
                    "scientificNameWithoutAuthor": name,
                    "scientificName": f"{name} Auth.",
                    "commonNames": common,
                },
            }
            for name, score, common in results
        ],
    }


class FakeClassifier:
    """Scripted PlantNet endpoint served by aiohttp's TestServer."""

    def __init__(self, responses: List[ScriptedResponse]):
        self.responses = list(responses)
        self.requests: List[dict] = []
        self.server: TestServer = None

    async def handle(self, request: web.Request) -> web.Response:
        form = await request.post()
        self.requests.append({
            "query": dict(request.query),
            "organs": form.get("organs"),
            "has_image": "images" in form,
        })
        index = min(len(self.requests), len(self.responses)) - 1
        status, body, *delay = self.responses[index]
        if delay:
            await asyncio.sleep(delay[0])
        text = body if isinstance(body, str) else json.dumps(body)
        return web.Response(status=status, text=text, content_type="application/json")

    async def start(self) -> "FakeClassifier":
        app = web.Application()
        app.router.add_post("/v2/identify/all", self.handle)
        self.server = TestServer(app)
        await self.server.start_server()
        return self

    @property
    def url(self) -> str:
        return str(self.server.make_url("/v2/identify/all"))

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def close(self) -> None:
        await self.server.close()


@pytest.fixture
async def fake_classifier():
    """Factory fixture: await fake_classifier([(status, body), ...])."""
    started: List[FakeClassifier] = []

    async def factory(responses: List[ScriptedResponse]) -> FakeClassifier:
        classifier = await FakeClassifier(responses).start()
        started.append(classifier)
        return classifier

    yield factory

    for classifier in started:
        await classifier.close()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings for tests: SQLite database, fast backoff, in-memory cache, no storage."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        IDENTIFICATION_CACHE_BACKEND="memory",
        CLASSIFIER_BASE_DELAY=0.05,
        CLASSIFIER_ATTEMPT_TIMEOUT=2.0,
        PLANTNET_API_KEY="test-key",
        SUPABASE_URL=None,
        SUPABASE_SERVICE_ROLE_KEY=None,
    )


@pytest.fixture
async def db_manager(settings: Settings):
    manager = DatabaseConnectionManager(settings)
    await manager.initialize(create_tables=True)
    yield manager
    await manager.close()


@pytest.fixture
def session_factory(db_manager: DatabaseConnectionManager):
    return db_manager.session_factory


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes()


async def seed_species(session_factory, **fields: Any) -> None:
    """Insert one plant_species row."""
    async with session_factory() as session:
        async with session.begin():
            session.add(models.PlantSpeciesModel(**fields))
