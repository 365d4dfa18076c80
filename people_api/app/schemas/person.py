"""
Pydantic models for person data.

``Person`` is the domain entity that flows through enrichment and
storage.  ``PersonCreate`` and ``PersonUpdate`` are request bodies;
the ``*Response`` classes wrap payloads in the status envelope every
endpoint returns.

A person is either unenriched (``age``, ``gender`` and ``nationality``
are ``None``) or enriched (all three are set).  Only the enrichment
service fills those fields on creation.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

PATRONYMIC_NOT_APPLICABLE = "N/A"

STATUS_OK = "OK"
STATUS_ERROR = "Error"


class PersonBase(BaseModel):
    name: str = Field(..., examples=["Alexander"])
    surname: str = Field(..., examples=["Sidorov"])
    patronymic: str = Field(PATRONYMIC_NOT_APPLICABLE, examples=["Petrovich"])


class Person(PersonBase):
    """A person record, enriched or not."""

    id: Optional[int] = None
    age: Optional[int] = Field(None, ge=0, examples=[42])
    gender: Optional[str] = Field(None, examples=["male"])
    nationality: Optional[str] = Field(None, examples=["RU"])

    @property
    def is_enriched(self) -> bool:
        return (
            self.age is not None
            and self.gender is not None
            and self.nationality is not None
        )


class PersonCreate(BaseModel):
    """Schema for creating a person.

    Derived fields are not accepted here; they come from enrichment.
    A missing or blank ``patronymic`` is stored as ``"N/A"``.
    """

    name: str = Field(..., min_length=2, max_length=50, examples=["Alexander"])
    surname: str = Field(..., min_length=2, max_length=50, examples=["Sidorov"])
    patronymic: Optional[str] = Field(
        None, max_length=50, validate_default=True, examples=["Petrovich"]
    )

    @field_validator("patronymic")
    @classmethod
    def normalise_patronymic(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            return PATRONYMIC_NOT_APPLICABLE
        if len(value) < 2:
            raise ValueError("patronymic must be at least 2 characters long")
        return value

    def to_person(self) -> Person:
        return Person(name=self.name, surname=self.surname, patronymic=self.patronymic)


class PersonUpdate(BaseModel):
    """Schema for a partial update.

    Every field is optional but at least one must be present.  ``None``
    means "leave unchanged"; an empty string is a value.
    """

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    surname: Optional[str] = Field(None, min_length=2, max_length=50)
    patronymic: Optional[str] = Field(None, min_length=2, max_length=50)
    age: Optional[int] = Field(None, ge=0)
    gender: Optional[str] = None
    nationality: Optional[str] = None

    @model_validator(mode="after")
    def require_one_field(self) -> "PersonUpdate":
        if not self.changes():
            raise ValueError("at least one field must be provided")
        return self

    def changes(self) -> dict:
        """Return only the fields that were provided."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class ResponseStatus(BaseModel):
    status: str = Field(..., examples=[STATUS_OK])
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ResponseStatus":
        return cls(status=STATUS_OK)

    @classmethod
    def fail(cls, message: str) -> "ResponseStatus":
        return cls(status=STATUS_ERROR, error=message)


class Meta(BaseModel):
    """Pagination metadata for list responses."""

    total: int
    limit: int
    offset: int
    next: bool


class PersonCreateResponse(BaseModel):
    response: ResponseStatus
    id: int
    data: Person


class PersonResponse(BaseModel):
    response: ResponseStatus
    data: Person


class PersonListResponse(BaseModel):
    response: ResponseStatus
    data: List[Person]
    meta: Meta
