"""
Business logic and persistence for people.

``PersonService`` is the storage capability the API handlers use:
create, get, update, delete, filtered pages and a health ping, all on
SQLite.  Every write runs in a transaction that is rolled back on
failure.  A missing ID raises ``PersonNotFoundError``; any database
failure is logged with full detail and re-raised as ``StorageError``.

Creation goes through ``create_person``, which enriches the person
before anything is written, so a failed enrichment persists nothing.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple

from ..core import db
from ..core.exceptions import PersonNotFoundError, StorageError
from ..schemas.filters import FilterOptions
from ..schemas.person import Person, PersonCreate, PersonUpdate
from .enrich_service import Enricher

logger = logging.getLogger(__name__)

PEOPLE_TABLE = "people"
PERSON_COLUMNS = "id, name, surname, patronymic, age, gender, nationality"


def build_filter_clause(filters: Optional[FilterOptions]) -> Tuple[str, List[Any]]:
    """Translate filter options into a ``WHERE`` clause and its parameters.

    Present filters are joined with ``AND``; absent ones add nothing.
    An exact age suppresses ``min_age`` and ``max_age``.  Returns an
    empty string when no filter is present.
    """
    if filters is None:
        return "", []

    where_clauses: List[str] = []
    params: List[Any] = []
    for column in ("name", "surname", "patronymic", "gender", "nationality"):
        value = getattr(filters, column)
        if value is not None:
            where_clauses.append(f"{column} = ?")
            params.append(value)

    if filters.age is not None:
        where_clauses.append("age = ?")
        params.append(filters.age)
    else:
        if filters.min_age is not None:
            where_clauses.append("age >= ?")
            params.append(filters.min_age)
        if filters.max_age is not None:
            where_clauses.append("age <= ?")
            params.append(filters.max_age)

    if not where_clauses:
        return "", []
    return " WHERE " + " AND ".join(where_clauses), params


def _row_to_person(row: sqlite3.Row) -> Person:
    return Person(
        id=row["id"],
        name=row["name"],
        surname=row["surname"],
        patronymic=row["patronymic"],
        age=row["age"],
        gender=row["gender"],
        nationality=row["nationality"],
    )


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        logger.error("can't %s: %s", operation, exc)
        raise StorageError(f"can't {operation}: {exc}", operation=operation) from exc


class PersonService:
    """Storage operations for person records."""

    @classmethod
    async def create(cls, person: Person) -> int:
        """Insert ``person`` and return the ID assigned by the database."""
        with _storage_errors("save person"):
            with db.get_cursor() as cursor:
                cursor.execute(
                    f"""
                    INSERT INTO {PEOPLE_TABLE} (name, surname, patronymic, age, gender, nationality)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        person.name,
                        person.surname,
                        person.patronymic,
                        person.age,
                        person.gender,
                        person.nationality,
                    ),
                )
                person_id = cursor.lastrowid
        return person_id

    @classmethod
    async def get(cls, person_id: int) -> Person:
        """Return the person with ``person_id`` or raise ``PersonNotFoundError``."""
        with _storage_errors("find person"):
            with db.get_cursor() as cursor:
                row = cursor.execute(
                    f"SELECT {PERSON_COLUMNS} FROM {PEOPLE_TABLE} WHERE id = ?",
                    (person_id,),
                ).fetchone()
        if row is None:
            logger.debug("Person %s was not found", person_id)
            raise PersonNotFoundError(person_id)
        return _row_to_person(row)

    @classmethod
    async def update(cls, person: Person, person_id: int) -> None:
        """Overwrite every stored field of ``person_id`` with ``person``."""
        with _storage_errors("update person"):
            with db.get_cursor() as cursor:
                cursor.execute(
                    f"""
                    UPDATE {PEOPLE_TABLE}
                    SET name = ?, surname = ?, patronymic = ?, age = ?, gender = ?,
                        nationality = ?, updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                    """,
                    (
                        person.name,
                        person.surname,
                        person.patronymic,
                        person.age,
                        person.gender,
                        person.nationality,
                        person_id,
                    ),
                )
                if cursor.rowcount == 0:
                    raise PersonNotFoundError(person_id)

    @classmethod
    async def delete(cls, person_id: int) -> None:
        with _storage_errors("delete person"):
            with db.get_cursor() as cursor:
                cursor.execute(f"DELETE FROM {PEOPLE_TABLE} WHERE id = ?", (person_id,))
                if cursor.rowcount == 0:
                    raise PersonNotFoundError(person_id)

    @classmethod
    async def filtered_pages(
        cls,
        offset: int,
        limit: int,
        filters: Optional[FilterOptions] = None,
    ) -> Tuple[List[Person], int]:
        """Return one page of matching people and the total match count.

        The count uses the same predicates as the page but ignores
        ``offset`` and ``limit``.  Pages are ordered by ID.
        """
        where, params = build_filter_clause(filters)
        with _storage_errors("list people"):
            with db.get_cursor() as cursor:
                total = cursor.execute(
                    f"SELECT COUNT(*) AS total FROM {PEOPLE_TABLE}{where}",
                    tuple(params),
                ).fetchone()["total"]
                query = (
                    f"SELECT {PERSON_COLUMNS} FROM {PEOPLE_TABLE}{where}"
                    " ORDER BY id LIMIT ? OFFSET ?"
                )
                logger.debug("Query statement enriched by filters: %s", query)
                rows = cursor.execute(query, (*params, limit, offset)).fetchall()
        return [_row_to_person(row) for row in rows], total

    @classmethod
    async def ping(cls) -> None:
        db.ping()

    @classmethod
    async def close(cls) -> None:
        # Connections are opened per operation; nothing is held open.
        logger.info("Storage is closed")

    @classmethod
    async def create_person(cls, data: PersonCreate, enricher: Enricher) -> Person:
        """Enrich a new person and persist it.

        ``EnrichmentError`` propagates before anything is written.
        """
        person = await enricher.enrich(data.to_person())
        person.id = await cls.create(person)
        logger.info("Person saved: id=%s %s %s", person.id, person.name, person.surname)
        return person

    @classmethod
    async def update_person(cls, person_id: int, updates: PersonUpdate) -> Person:
        """Apply the fields present in ``updates`` and return the result."""
        person = await cls.get(person_id)
        for field, value in updates.changes().items():
            setattr(person, field, value)
            logger.debug("Field %s changed", field)
        await cls.update(person, person_id)
        logger.info("Person updated: id=%s", person_id)
        return person

    @classmethod
    async def delete_person(cls, person_id: int) -> None:
        await cls.delete(person_id)
        logger.info("Person deleted: id=%s", person_id)
