from functools import lru_cache

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from unique_validation.config.settings import get_settings


# The client owns the connection pool; one per process. Construction does not
# connect, the first operation does.
@lru_cache()
def get_client() -> AsyncMongoClient:
    settings = get_settings()
    return AsyncMongoClient(settings.MONGO_URI, tz_aware=True)


def get_database() -> AsyncDatabase:
    """FastAPI-friendly dependency returning the configured database.

    Usage:
        async def endpoint(db: AsyncDatabase = Depends(get_database)):
            await db["users"].insert_one(...)
    """
    return get_client()[get_settings().MONGO_DB]
