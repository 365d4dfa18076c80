from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from people_api.app.api.dependencies import get_enricher
from people_api.app.core import db
from people_api.app.core.config import settings
from people_api.app.main import app
from people_api.app.services.enrich_service import Enricher

AGE_URL = "http://agify.test/"
GENDER_URL = "http://genderize.test/"
NATIONALITY_URL = "http://nationalize.test/"

HOST_TO_SOURCE = {
    "agify.test": "age",
    "genderize.test": "gender",
    "nationalize.test": "nationality",
}


class FakeSources:
    """Canned answers for the age, gender and nationality APIs.

    Responses default to the "Oleg" example: 55, male, UA first.
    ``before_response`` may hold a coroutine function run for every
    request before it is answered, to delay or block it.
    """

    def __init__(self) -> None:
        self.responses: Dict[str, httpx.Response] = {}
        self.errors: Dict[str, Exception] = {}
        self.calls: List[httpx.Request] = []
        self.before_response: Optional[Callable[[httpx.Request], Awaitable[Any]]] = None
        self.respond("age", json={"count": 1, "name": "Oleg", "age": 55})
        self.respond("gender", json={"count": 1, "name": "Oleg", "gender": "male", "probability": 0.99})
        self.respond(
            "nationality",
            json={
                "count": 1,
                "name": "Oleg",
                "country": [
                    {"country_id": "UA", "probability": 0.9},
                    {"country_id": "RU", "probability": 0.05},
                ],
            },
        )

    def respond(self, source: str, status_code: int = 200, json: Any = None, content: bytes = None) -> None:
        if content is not None:
            self.responses[source] = httpx.Response(status_code, content=content)
        else:
            self.responses[source] = httpx.Response(status_code, json=json)

    def fail(self, source: str, error: Exception) -> None:
        self.errors[source] = error

    def calls_to(self, source: str) -> List[httpx.Request]:
        return [r for r in self.calls if HOST_TO_SOURCE[r.url.host] == source]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        source = HOST_TO_SOURCE[request.url.host]
        if self.before_response is not None:
            await self.before_response(request)
        if source in self.errors:
            raise self.errors[source]
        response = self.responses[source]
        return httpx.Response(response.status_code, content=response.content, headers=response.headers)

    def enricher(self) -> Enricher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return Enricher(
            client,
            age_url=AGE_URL,
            gender_url=GENDER_URL,
            nationality_url=NATIONALITY_URL,
        )


@pytest.fixture
def sources() -> FakeSources:
    return FakeSources()


@pytest.fixture
def enricher(sources: FakeSources) -> Enricher:
    return sources.enricher()


@pytest.fixture
def database(tmp_path, monkeypatch):
    path = tmp_path / "people.db"
    monkeypatch.setattr(settings, "database_url", str(path))
    db.init_db()
    return path


@pytest.fixture
def client(database, enricher):
    app.dependency_overrides[get_enricher] = lambda: enricher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
