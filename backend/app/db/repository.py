"""
Shared plumbing for the async repositories.

Every public repository call is a coroutine. The blocking SQLModel work runs in
a worker thread with its own Session, so one caller awaiting the store never
blocks another. Each unit of work commits at most once: either everything it
wrote is visible afterwards, or nothing is.
"""
import asyncio
import logging
from typing import Callable, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from backend.app.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionRepository:
    """Base class for repositories that own no session between calls."""

    def __init__(self, engine: Engine):
        self.engine = engine

    async def _run(self, operation: str, work: Callable[[Session], T]) -> T:
        return await asyncio.to_thread(self._run_sync, operation, work)

    def _run_sync(self, operation: str, work: Callable[[Session], T]) -> T:
        with Session(self.engine) as session:
            try:
                return work(session)
            except SQLAlchemyError as e:
                session.rollback()
                logger.error("%s failed: %s", operation, e)
                raise PersistenceError(operation) from e
