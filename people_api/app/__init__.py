"""
Application package initializer.

The People API stores person records enriched with age, gender and
nationality inferred from the first name.  ``core`` holds settings,
logging, errors and the database; ``services`` the enrichment and
storage logic; ``schemas`` the payloads; ``api`` the versioned
routers.
"""

from .main import app  # noqa: F401
