"""Exception hierarchy for the People API.

Callers distinguish failures by type: ``PersonNotFoundError`` is the
"absent" signal, everything else is a fault.  Messages are meant for
logs, not for API clients.
"""

from __future__ import annotations

from typing import Optional


class PeopleAPIError(Exception):
    """Base class for all application errors."""


class PersonNotFoundError(PeopleAPIError):
    """Raised when no person exists with the requested ID."""

    def __init__(self, person_id: int) -> None:
        super().__init__(f"Person {person_id} not found")
        self.person_id = person_id


class SourceError(PeopleAPIError):
    """A single enrichment source could not produce a value.

    Transport errors, non-200 statuses, undecodable bodies and empty
    results are all reported the same way.
    """

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source} API: {message}")
        self.source = source


class EnrichmentError(PeopleAPIError):
    """Enrichment failed; wraps the first source failure observed."""

    def __init__(self, source_error: SourceError) -> None:
        super().__init__(f"failed to enrich person data: {source_error}")
        self.source_error = source_error

    @property
    def source(self) -> str:
        return self.source_error.source


class StorageError(PeopleAPIError):
    """Connection, query or commit failure in the datastore."""

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation
