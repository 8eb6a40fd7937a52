"""Core infrastructure: configuration, logging, tracing, database and auth."""
