import pytest
from pydantic import ValidationError

from people_api.app.schemas.person import Person, PersonCreate, PersonUpdate


@pytest.mark.parametrize("patronymic", [None, "", " ", "\t"])
def test_blank_patronymic_becomes_not_applicable(patronymic):
    data = PersonCreate(name="Oleg", surname="Petrov", patronymic=patronymic)

    assert data.patronymic == "N/A"


def test_short_patronymic_is_rejected():
    with pytest.raises(ValidationError):
        PersonCreate(name="Oleg", surname="Petrov", patronymic="I")


def test_to_person_is_unenriched():
    person = PersonCreate(name="Oleg", surname="Petrov", patronymic="Ivanovich").to_person()

    assert person.id is None
    assert not person.is_enriched
    assert (person.age, person.gender, person.nationality) == (None, None, None)


def test_update_needs_at_least_one_field():
    with pytest.raises(ValidationError, match="at least one field must be provided"):
        PersonUpdate()


def test_update_reports_only_present_fields():
    assert PersonUpdate(gender="female").changes() == {"gender": "female"}
    assert PersonUpdate(age=0).changes() == {"age": 0}


def test_update_rejects_negative_age():
    with pytest.raises(ValidationError):
        PersonUpdate(age=-1)


def test_partially_filled_person_is_not_enriched():
    assert not Person(name="Oleg", surname="Petrov", age=55, gender="male").is_enriched


def test_missing_patronymic_becomes_not_applicable():
    data = PersonCreate(name="Oleg", surname="Petrov")

    assert data.patronymic == "N/A"
    assert data.to_person().patronymic == "N/A"
