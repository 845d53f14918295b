"""FastAPI dependency injection."""

from datetime import date
from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from recurring_ledger.config import settings
from recurring_ledger.store.base import ObligationStore
from recurring_ledger.store.sql import SqlStore


@lru_cache
def get_sessionmaker() -> async_sessionmaker:
    engine = create_async_engine(settings.database_url, echo=settings.debug)
    return async_sessionmaker(engine, expire_on_commit=False)


async def get_store() -> AsyncIterator[ObligationStore]:
    async with get_sessionmaker()() as session:
        yield SqlStore(session)


def get_today() -> date:
    return date.today()
