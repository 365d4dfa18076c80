"""
People endpoints for API v1.

Listing with filters and pagination, creation with enrichment,
lookup, partial update and deletion.  Validation problems are
answered by FastAPI with 422, unknown IDs with 404, and enrichment or
storage failures with an opaque 500; the details only go to the log.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from people_api.app.api.dependencies import get_enricher, get_request_id
from people_api.app.core.exceptions import (
    EnrichmentError,
    PersonNotFoundError,
    StorageError,
)
from people_api.app.schemas.filters import FilterOptions
from people_api.app.schemas.person import (
    Meta,
    PersonCreate,
    PersonCreateResponse,
    PersonListResponse,
    PersonResponse,
    PersonUpdate,
    ResponseStatus,
)
from people_api.app.services.enrich_service import Enricher
from people_api.app.services.person_service import PersonService

logger = logging.getLogger(__name__)

router = APIRouter()

INTERNAL_ERROR = "Internal server error"


def _not_found(exc: PersonNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _internal_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.get("", response_model=PersonListResponse)
async def list_people(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(10, ge=1, le=1000, description="Records per page"),
    name: Optional[str] = Query(None, examples=["Oleg"]),
    surname: Optional[str] = Query(None, examples=["Ivanov"]),
    patronymic: Optional[str] = Query(None, examples=["Petrovich"]),
    age: Optional[int] = Query(None, ge=0, description="Exact age; overrides minAge/maxAge"),
    min_age: Optional[int] = Query(None, alias="minAge", ge=0),
    max_age: Optional[int] = Query(None, alias="maxAge", ge=0),
    gender: Optional[str] = Query(None, examples=["male"]),
    nationality: Optional[str] = Query(None, examples=["RU"]),
    request_id: str = Depends(get_request_id),
) -> PersonListResponse:
    """List people matching every given filter, one page at a time.

    ``meta.total`` counts all matches across pages and ``meta.next``
    tells whether another page follows.
    """
    filters = FilterOptions(
        name=name,
        surname=surname,
        patronymic=patronymic,
        age=age,
        min_age=min_age,
        max_age=max_age,
        gender=gender,
        nationality=nationality,
    )
    offset = (page - 1) * limit
    logger.debug("Pagination query page=%d limit=%d requestID=%s", page, limit, request_id)

    try:
        people, total = await PersonService.filtered_pages(offset, limit, filters)
    except StorageError as e:
        logger.error("can't get list of persons requestID=%s", request_id)
        raise _internal_error() from e

    meta = Meta(total=total, limit=limit, offset=offset, next=(offset + limit) < total)
    return PersonListResponse(response=ResponseStatus.ok(), data=people, meta=meta)


@router.post("", response_model=PersonCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_person(
    data: PersonCreate,
    enricher: Enricher = Depends(get_enricher),
    request_id: str = Depends(get_request_id),
) -> PersonCreateResponse:
    """Create a person, enriched with age, gender and nationality.

    Nothing is saved when enrichment fails.
    """
    try:
        person = await PersonService.create_person(data, enricher)
    except EnrichmentError as e:
        logger.error("can't enrich person requestID=%s: %s", request_id, e)
        raise _internal_error() from e
    except StorageError as e:
        logger.error("can't save person requestID=%s", request_id)
        raise _internal_error() from e
    return PersonCreateResponse(response=ResponseStatus.ok(), id=person.id, data=person)


@router.get("/{person_id}", response_model=PersonResponse)
async def get_person(
    person_id: int,
    request_id: str = Depends(get_request_id),
) -> PersonResponse:
    try:
        person = await PersonService.get(person_id)
    except PersonNotFoundError as e:
        raise _not_found(e) from e
    except StorageError as e:
        logger.error("can't find person requestID=%s", request_id)
        raise _internal_error() from e
    return PersonResponse(response=ResponseStatus.ok(), data=person)


@router.patch("/{person_id}", response_model=PersonResponse)
async def update_person(
    person_id: int,
    updates: PersonUpdate,
    request_id: str = Depends(get_request_id),
) -> PersonResponse:
    """Update any field of a person; at least one field is required."""
    try:
        person = await PersonService.update_person(person_id, updates)
    except PersonNotFoundError as e:
        logger.info("person %s not found requestID=%s", person_id, request_id)
        raise _not_found(e) from e
    except StorageError as e:
        logger.error("can't update person requestID=%s", request_id)
        raise _internal_error() from e
    return PersonResponse(response=ResponseStatus.ok(), data=person)


@router.delete("/{person_id}", response_model=ResponseStatus)
async def delete_person(
    person_id: int,
    request_id: str = Depends(get_request_id),
) -> ResponseStatus:
    try:
        await PersonService.delete_person(person_id)
    except PersonNotFoundError as e:
        logger.info("person %s not found requestID=%s", person_id, request_id)
        raise _not_found(e) from e
    except StorageError as e:
        logger.error("can't delete person requestID=%s", request_id)
        raise _internal_error() from e
    return ResponseStatus.ok()
