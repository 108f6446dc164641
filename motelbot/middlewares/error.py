import logging
from typing import Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.exceptions import TelegramAPIError
from aiogram.types import TelegramObject, Update
from motelbot.config import config
from motelbot.utils.i18n import t
from motelbot.utils.ui import UIMessages


class GlobalErrorMiddleware(BaseMiddleware):
    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        try:
            return await handler(event, data)
        except Exception as e:
            logging.exception(f"Unhandled exception in bot update: {e}")

            lang = config.DEFAULT_LANGUAGE
            state = data.get("state")
            if state is not None:
                try:
                    lang = (await state.get_data()).get("lang") or lang
                except Exception:
                    logging.exception("Could not read language from FSM storage")

            # Registered on dp.update, so unwrap the actual message / callback
            if isinstance(event, Update):
                message, callback = event.message, event.callback_query
            else:
                message, callback = None, None

            try:
                if message is not None:
                    await message.answer(UIMessages.warning(t("error.generic", lang)))
                elif callback is not None:
                    await callback.answer(t("error.generic", lang), show_alert=True)
            except TelegramAPIError as send_error:
                logging.warning(f"Could not notify user about the error: {send_error}")

            # Swallow so polling keeps running; the traceback is logged above
            return None
