"""Use-case orchestration and external identity provider adapters."""
