import logging
from typing import Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


class DbSessionMiddleware(BaseMiddleware):
    """
    Opens one session per update and hands it to handlers as `session`.

    Services commit their own unit of work, so the closing commit only
    runs when a handler left changes of its own in the session.
    """

    def __init__(self, session_pool: async_sessionmaker[AsyncSession]):
        self.session_pool = session_pool

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        async with self.session_pool() as session:
            data["session"] = session
            try:
                result = await handler(event, data)
                if session.new or session.dirty or session.deleted:
                    await session.commit()
                return result
            except SQLAlchemyError:
                update_id = event.update_id if isinstance(event, Update) else None
                logging.error(f"Database error while handling update {update_id}, rolling back")
                await session.rollback()
                raise
            except Exception:
                await session.rollback()
                raise
