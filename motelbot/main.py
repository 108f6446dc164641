import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.enums import ParseMode
from aiogram.client.default import DefaultBotProperties
from sqlalchemy.exc import SQLAlchemyError

from motelbot.config import config
from motelbot.handlers import common, rooms, tenants, contracts, payments, utilities, reports, settings


async def main():
    # Configure logging
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        stream=sys.stdout,
    )

    bot = Bot(
        token=config.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )
    dp = Dispatcher()

    # Middleware registration
    # Order: Error Handler (wraps everything) -> DB Session
    from motelbot.database.core import AsyncSessionLocal
    from motelbot.middlewares.db import DbSessionMiddleware
    from motelbot.middlewares.error import GlobalErrorMiddleware

    dp.update.outer_middleware(GlobalErrorMiddleware())
    dp.update.middleware(DbSessionMiddleware(AsyncSessionLocal))

    # Router registration - ORDER MATTERS!
    # common first so /cancel and /start win over any FSM step,
    # fallback last so it only sees what no admin handler took
    dp.include_router(common.router)
    dp.include_router(rooms.router)
    dp.include_router(tenants.router)
    dp.include_router(contracts.router)
    dp.include_router(payments.router)
    dp.include_router(utilities.router)
    dp.include_router(reports.router)
    dp.include_router(settings.router)
    dp.include_router(common.fallback_router)

    # Load admins and seed defaults
    from motelbot.services.user_service import reload_admin_cache
    from motelbot.services.settings_service import ensure_default_settings

    try:
        async with AsyncSessionLocal() as session:
            count = await reload_admin_cache(session)
            logging.info(f"Loaded {count} admins from DB.")
            created = await ensure_default_settings(session)
            if created:
                logging.info(f"Created {created} default settings.")
    except SQLAlchemyError as e:
        logging.error(f"Failed to prepare DB state: {e}")

    logging.info("Starting bot...")
    await dp.start_polling(bot)

if __name__ == "__main__":
    try:
        if sys.platform == "win32":
            asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.info("Bot stopped.")
