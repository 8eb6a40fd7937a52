"""Domain entities, error codes and the response envelope."""
