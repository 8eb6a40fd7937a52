"""Request schemas for the HTTP layer."""
