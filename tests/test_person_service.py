import pytest

from people_api.app.core import db
from people_api.app.core.config import settings
from people_api.app.core.exceptions import (
    EnrichmentError,
    PersonNotFoundError,
    StorageError,
)
from people_api.app.schemas.filters import FilterOptions
from people_api.app.schemas.person import Person, PersonCreate, PersonUpdate
from people_api.app.services.person_service import PersonService, build_filter_clause


def enriched(name, surname="Ivanov", age=30, gender="male", nationality="RU", patronymic="N/A"):
    return Person(
        name=name,
        surname=surname,
        patronymic=patronymic,
        age=age,
        gender=gender,
        nationality=nationality,
    )


async def seed(*people):
    ids = []
    for person in people:
        ids.append(await PersonService.create(person))
    return ids


def test_no_filters_means_no_where_clause():
    assert build_filter_clause(None) == ("", [])
    assert build_filter_clause(FilterOptions()) == ("", [])


def test_filters_are_joined_with_and():
    where, params = build_filter_clause(
        FilterOptions(name="Oleg", gender="male", nationality="UA", min_age=18, max_age=60)
    )

    assert where == " WHERE name = ? AND gender = ? AND nationality = ? AND age >= ? AND age <= ?"
    assert params == ["Oleg", "male", "UA", 18, 60]


def test_exact_age_suppresses_age_range():
    where, params = build_filter_clause(FilterOptions(age=42, min_age=10, max_age=20))

    assert where == " WHERE age = ?"
    assert params == [42]


def test_min_and_max_age_are_independent():
    assert build_filter_clause(FilterOptions(min_age=21)) == (" WHERE age >= ?", [21])
    assert build_filter_clause(FilterOptions(max_age=65)) == (" WHERE age <= ?", [65])


def test_empty_string_is_a_value_not_absence():
    assert build_filter_clause(FilterOptions(patronymic="")) == (" WHERE patronymic = ?", [""])


@pytest.mark.asyncio
async def test_create_then_get_round_trip(database):
    person = enriched("Oleg", surname="Petrov", patronymic="Ivanovich", age=55, nationality="UA")

    person_id = await PersonService.create(person)
    person.id = person_id

    assert person_id > 0
    assert await PersonService.get(person_id) == person


@pytest.mark.asyncio
async def test_get_unknown_id_raises_not_found(database):
    with pytest.raises(PersonNotFoundError) as exc_info:
        await PersonService.get(999)

    assert exc_info.value.person_id == 999


@pytest.mark.asyncio
async def test_update_overwrites_fields(database):
    [person_id] = await seed(enriched("Anna", gender="female"))
    person = await PersonService.get(person_id)
    person.age = 31

    await PersonService.update(person, person_id)

    assert (await PersonService.get(person_id)).age == 31


@pytest.mark.asyncio
async def test_update_unknown_id_raises_not_found(database):
    with pytest.raises(PersonNotFoundError):
        await PersonService.update(enriched("Anna"), 12345)


@pytest.mark.asyncio
async def test_delete(database):
    [person_id] = await seed(enriched("Anna"))

    await PersonService.delete(person_id)

    with pytest.raises(PersonNotFoundError):
        await PersonService.get(person_id)
    with pytest.raises(PersonNotFoundError):
        await PersonService.delete(person_id)


@pytest.mark.asyncio
async def test_filtered_pages_total_ignores_offset_and_limit(database):
    await seed(
        *[enriched(f"Male{i:02d}", gender="male", age=20 + i) for i in range(7)],
        *[enriched(f"Female{i:02d}", gender="female", age=20 + i) for i in range(3)],
    )
    filters = FilterOptions(gender="male")

    page, total = await PersonService.filtered_pages(offset=5, limit=5, filters=filters)

    assert total == 7
    assert [p.name for p in page] == ["Male05", "Male06"]
    assert all(p.id is not None for p in page)


@pytest.mark.asyncio
async def test_filtered_pages_applies_only_exact_age(database):
    await seed(enriched("Young", age=18), enriched("Middle", age=40), enriched("Old", age=70))

    people, total = await PersonService.filtered_pages(
        0, 10, FilterOptions(age=70, min_age=10, max_age=50)
    )

    assert total == 1
    assert [p.name for p in people] == ["Old"]


@pytest.mark.asyncio
async def test_filtered_pages_age_range(database):
    await seed(enriched("Young", age=18), enriched("Middle", age=40), enriched("Old", age=70))

    people, total = await PersonService.filtered_pages(0, 10, FilterOptions(min_age=18, max_age=40))

    assert total == 2
    assert [p.name for p in people] == ["Young", "Middle"]


@pytest.mark.asyncio
async def test_filtered_pages_past_the_end(database):
    await seed(enriched("Only"))

    people, total = await PersonService.filtered_pages(10, 10)

    assert people == []
    assert total == 1


@pytest.mark.asyncio
async def test_create_person_enriches_and_persists(database, enricher):
    person = await PersonService.create_person(
        PersonCreate(name="Oleg", surname="Petrov"), enricher
    )

    assert person.id is not None
    assert (person.age, person.gender, person.nationality) == (55, "male", "UA")
    assert person.patronymic == "N/A"
    assert await PersonService.get(person.id) == person


@pytest.mark.asyncio
async def test_failed_enrichment_persists_nothing(database, enricher, sources):
    sources.respond("gender", status_code=500)

    with pytest.raises(EnrichmentError):
        await PersonService.create_person(PersonCreate(name="Oleg", surname="Petrov"), enricher)

    people, total = await PersonService.filtered_pages(0, 10)
    assert people == []
    assert total == 0


@pytest.mark.asyncio
async def test_update_person_applies_only_present_fields(database):
    [person_id] = await seed(enriched("Anna", surname="Smirnova", gender="female", age=25))

    person = await PersonService.update_person(person_id, PersonUpdate(age=26, nationality="KZ"))

    assert person == await PersonService.get(person_id)
    assert (person.name, person.surname, person.gender) == ("Anna", "Smirnova", "female")
    assert (person.age, person.nationality) == (26, "KZ")


@pytest.mark.asyncio
async def test_update_person_unknown_id(database):
    with pytest.raises(PersonNotFoundError):
        await PersonService.update_person(77, PersonUpdate(age=1))


@pytest.mark.asyncio
async def test_query_failure_becomes_storage_error(database):
    with db.get_cursor() as cursor:
        cursor.execute("DROP TABLE people")

    with pytest.raises(StorageError) as exc_info:
        await PersonService.filtered_pages(0, 10)

    assert exc_info.value.operation == "list people"


@pytest.mark.asyncio
async def test_ping(database):
    await PersonService.ping()


@pytest.mark.asyncio
async def test_ping_unreachable_database(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "missing" / "people.db"))

    with pytest.raises(StorageError):
        await PersonService.ping()


def test_migrations_are_idempotent(database):
    db.init_db()

    with db.get_cursor() as cursor:
        versions = [row["version"] for row in cursor.execute("SELECT version FROM migrations")]
    assert versions == [1, 2]
