"""Settings, logging, error types and database access."""
