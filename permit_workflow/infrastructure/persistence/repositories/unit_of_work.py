"""Unit of work over an AsyncSession: one savepoint per atomic block."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession


class SqlAlchemyUnitOfWork:
    """Implements IUnitOfWork with SAVEPOINTs (session.begin_nested()).

    Writes inside ``atomic()`` are released together or rolled back to the
    savepoint; the outer request transaction stays usable either way.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        async with self.db.begin_nested():
            yield
