"""Shared FastAPI dependencies."""

from fastapi import Request

from ..services.enrich_service import Enricher


def get_enricher(request: Request) -> Enricher:
    """Return the process-wide enricher created by the app lifespan."""
    return request.app.state.enricher


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")
