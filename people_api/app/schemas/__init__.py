"""
Pydantic schema definitions for API payloads.

``person`` holds the domain entity plus request and response bodies;
``filters`` holds the list query predicates.  Schemas are separated
from the SQL in the service layer to decouple API representation from
persistence.
"""
