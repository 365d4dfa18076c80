"""People API client.

A small synchronous wrapper around the People API REST endpoints,
built on the ``requests`` library.  It exposes one method per
operation:

* :meth:`PeopleAPIClient.list_people` – one filtered page of people.
* :meth:`PeopleAPIClient.create_person` – create (and enrich) a person.
* :meth:`PeopleAPIClient.get_person` – fetch a person by ID.
* :meth:`PeopleAPIClient.update_person` – change some fields.
* :meth:`PeopleAPIClient.delete_person` – remove a person.
* :meth:`PeopleAPIClient.health` – check that the service is up.

Every method returns a tuple ``(data, error)``.  On success ``error``
is ``None``; on failure ``data`` is ``None`` and ``error`` is a
dictionary with keys ``status_code`` and ``message``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]

API_PREFIX = "/api/v1"

# Keyword arguments whose query parameter is spelled differently.
QUERY_NAMES = {"min_age": "minAge", "max_age": "maxAge"}


class PeopleAPIClient:
    """Client for the People API."""

    def __init__(
        self,
        *,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the service, e.g. ``http://localhost:8080``.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for each response.  Creating a
                person waits on enrichment, so keep this generous.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PATCH``, ``DELETE``).
            path: Path relative to :attr:`base_url` (e.g. ``/api/v1/people``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request (for POST/PATCH).
        Returns:
            A tuple ``(data, error)``.
        """
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = _error_message(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # People operations
    # ------------------------------------------------------------------
    def list_people(self, page: int = 1, limit: int = 10, **filters: Any) -> Result:
        """Retrieve one page of people.

        Keyword arguments are passed as filters (``name``, ``surname``,
        ``patronymic``, ``age``, ``min_age``, ``max_age``, ``gender``,
        ``nationality``); ``None`` values are dropped, and ``min_age`` and
        ``max_age`` are sent as ``minAge`` and ``maxAge``.  On success
        ``data`` is the full response with ``data`` and ``meta`` keys.
        """
        params: Dict[str, Any] = {"page": page, "limit": limit}
        params.update(
            {QUERY_NAMES.get(k, k): v for k, v in filters.items() if v is not None}
        )
        return self._request("GET", f"{API_PREFIX}/people", params=params)

    def create_person(
        self, name: str, surname: str, patronymic: Optional[str] = None
    ) -> Result:
        """Create a person and return the enriched record."""
        body: Dict[str, Any] = {"name": name, "surname": surname}
        if patronymic is not None:
            body["patronymic"] = patronymic
        data, error = self._request("POST", f"{API_PREFIX}/people", json_body=body)
        if error:
            return None, error
        return data.get("data"), None

    def get_person(self, person_id: int) -> Result:
        data, error = self._request("GET", f"{API_PREFIX}/people/{person_id}")
        if error:
            return None, error
        return data.get("data"), None

    def update_person(self, person_id: int, **fields: Any) -> Result:
        """Update the given fields of a person; ``None`` values are dropped."""
        body = {k: v for k, v in fields.items() if v is not None}
        if not body:
            return None, {"status_code": None, "message": "at least one field must be provided"}
        data, error = self._request("PATCH", f"{API_PREFIX}/people/{person_id}", json_body=body)
        if error:
            return None, error
        return data.get("data"), None

    def delete_person(self, person_id: int) -> Result:
        return self._request("DELETE", f"{API_PREFIX}/people/{person_id}")

    def health(self) -> Result:
        return self._request("GET", "/health")


def _error_message(err_json: Any) -> str:
    """Extract a readable message from an error body.

    FastAPI puts it under ``detail``: a string for HTTP errors, a list
    of problems for validation errors.
    """
    if not isinstance(err_json, dict):
        return str(err_json)
    detail = err_json.get("detail")
    if isinstance(detail, list):
        return "; ".join(str(item.get("msg", item)) if isinstance(item, dict) else str(item) for item in detail)
    if detail:
        return str(detail)
    response = err_json.get("response")
    if isinstance(response, dict) and response.get("error"):
        return str(response["error"])
    return str(err_json)
