"""Storage ports and SQLAlchemy adapters."""
