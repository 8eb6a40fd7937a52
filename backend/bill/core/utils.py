"""Core utility functions."""

SYNC_DRIVERS = {
    "+asyncpg": "+psycopg",
    "+aiosqlite": "",
}


def convert_async_db_url_to_sync(database_url: str) -> str:
    """
    Convert an async database URL to its synchronous equivalent.

    Alembic runs migrations synchronously, so ``postgresql+asyncpg://`` becomes
    ``postgresql+psycopg://`` and ``sqlite+aiosqlite://`` becomes ``sqlite://``.
    Only the scheme is rewritten; credentials, host and path are kept verbatim.

    Args:
        database_url: The async database URL

    Returns:
        The sync database URL, or the input unchanged if it is not async
    """
    scheme, separator, remainder = database_url.partition("://")
    if not separator:
        return database_url
    for async_driver, sync_driver in SYNC_DRIVERS.items():
        if async_driver in scheme:
            return f"{scheme.replace(async_driver, sync_driver)}{separator}{remainder}"
    return database_url
