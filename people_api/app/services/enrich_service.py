"""
Person enrichment from public name-inference APIs.

``Enricher.enrich`` asks three independent sources (age, gender and
nationality, keyed by first name) at the same time and waits for all
of them.  The result is all or nothing: if any source fails, the
person is left untouched and ``EnrichmentError`` is raised with the
first failure observed.  Each source is tried exactly once per call;
there is no retry, caching or rate limiting.

One ``httpx.AsyncClient`` is shared by all calls.  Its timeout bounds
every request, and cancelling the caller cancels the requests still
in flight.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, Field, ValidationError

from ..core.config import settings
from ..core.exceptions import EnrichmentError, SourceError
from ..schemas.person import Person

logger = logging.getLogger(__name__)

SOURCE_AGE = "age"
SOURCE_GENDER = "gender"
SOURCE_NATIONALITY = "nationality"


class AgeResult(BaseModel):
    age: int = Field(..., ge=0)


class GenderResult(BaseModel):
    gender: str


class CountryResult(BaseModel):
    country_id: str
    probability: float = 0.0


class NationalityResult(BaseModel):
    # The source ranks entries by probability, most likely first.
    country: List[CountryResult] = Field(default_factory=list)


ResultT = TypeVar("ResultT", bound=BaseModel)


class Enricher:
    """Fills ``age``, ``gender`` and ``nationality`` of a person."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        age_url: Optional[str] = None,
        gender_url: Optional[str] = None,
        nationality_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(
                timeout=timeout if timeout is not None else settings.enrich_timeout
            )
        self.client = client
        self.age_url = age_url or settings.age_api_url
        self.gender_url = gender_url or settings.gender_api_url
        self.nationality_url = nationality_url or settings.nationality_api_url

    async def aclose(self) -> None:
        """Close the HTTP client if this enricher created it."""
        if self._owns_client:
            await self.client.aclose()

    async def enrich(self, person: Person) -> Person:
        """Enrich ``person`` in place and return it.

        Raises
        ------
        EnrichmentError
            If any of the three sources failed.  The person is not
            modified in that case.
        """
        tasks = {
            SOURCE_AGE: asyncio.create_task(self.fetch_age(person.name)),
            SOURCE_GENDER: asyncio.create_task(self.fetch_gender(person.name)),
            SOURCE_NATIONALITY: asyncio.create_task(self.fetch_nationality(person.name)),
        }

        failures: List[SourceError] = []
        try:
            # Wait for every fetch; failures are kept in the order they finish.
            for finished in asyncio.as_completed(list(tasks.values())):
                try:
                    await finished
                except SourceError as exc:
                    failures.append(exc)
        finally:
            pending = [task for task in tasks.values() if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if failures:
            error = EnrichmentError(failures[0])
            logger.error("can't enrich person %r: %s", person.name, error)
            raise error from failures[0]

        person.age = tasks[SOURCE_AGE].result()
        person.gender = tasks[SOURCE_GENDER].result()
        person.nationality = tasks[SOURCE_NATIONALITY].result()
        logger.debug(
            "enriched %r: age=%s gender=%s nationality=%s",
            person.name, person.age, person.gender, person.nationality,
        )
        return person

    async def fetch_age(self, name: str) -> int:
        result = await self._fetch(SOURCE_AGE, self.age_url, name, AgeResult)
        return result.age

    async def fetch_gender(self, name: str) -> str:
        result = await self._fetch(SOURCE_GENDER, self.gender_url, name, GenderResult)
        return result.gender

    async def fetch_nationality(self, name: str) -> str:
        """Return the first country the source lists for ``name``.

        The first entry wins even if a later entry reports a higher
        probability.
        """
        result = await self._fetch(
            SOURCE_NATIONALITY, self.nationality_url, name, NationalityResult
        )
        if not result.country:
            logger.error("failed to fetch nationality for %r: empty country list", name)
            raise SourceError(SOURCE_NATIONALITY, "empty country list")
        return result.country[0].country_id

    async def _fetch(
        self, source: str, url: str, name: str, schema: Type[ResultT]
    ) -> ResultT:
        """GET ``url?name=<name>`` and decode the body into ``schema``.

        Transport errors, any status other than 200 and undecodable
        bodies all raise ``SourceError``.
        """
        logger.debug("request to fetch %s for %r from %s", source, name, url)
        try:
            response = await self.client.get(url, params={"name": name})
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("failed to fetch %s for %r: %s", source, name, exc)
            raise SourceError(source, f"request failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            logger.error(
                "failed to fetch %s for %r: status %d", source, name, response.status_code
            )
            raise SourceError(source, f"unexpected status code: {response.status_code}")

        try:
            result = schema.model_validate_json(response.content)
        except ValidationError as exc:
            logger.error("failed to decode %s response for %r: %s", source, name, exc)
            raise SourceError(source, f"json decode failed: {exc}") from exc

        logger.debug("fetched %s for %r: %s", source, name, result)
        return result
