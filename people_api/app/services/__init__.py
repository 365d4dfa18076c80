"""
Service layer abstraction.

``enrich_service`` talks to the name-inference APIs and
``person_service`` to the database.  API handlers call services and
never touch SQL or HTTP clients directly.
"""
