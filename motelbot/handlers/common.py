from aiogram import Router, F
from aiogram.types import Message, CallbackQuery
from aiogram.filters import CommandStart, Command, Filter
from aiogram.fsm.context import FSMContext

from motelbot.config import config
from motelbot.utils.i18n import t, LANGUAGES
from motelbot.utils.ui import UIEmojis, UIMessages, UIKeyboards, get_lang, reset_state


class AdminFilter(Filter):
    async def __call__(self, event) -> bool:
        # Works for both Message and CallbackQuery
        if hasattr(event, 'from_user') and event.from_user:
            return config.is_admin(event.from_user.id)
        return False


router = Router()
router.message.filter(AdminFilter())
router.callback_query.filter(AdminFilter())

# Everything the admin routers did not take ends up here
fallback_router = Router()


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext):
    await reset_state(state)
    lang = await get_lang(state)

    text = UIMessages.header(t("menu.title", lang), UIEmojis.HOME)
    text += f"{message.from_user.full_name}\n\n"
    text += t("help.text", lang)

    await message.answer(text, reply_markup=UIKeyboards.main_reply_keyboard(lang))


@router.message(F.text.startswith(UIEmojis.HELP))
@router.message(Command("help"))
async def cmd_help(message: Message, state: FSMContext):
    lang = await get_lang(state)
    text = UIMessages.header(t("menu.help", lang).lstrip(UIEmojis.HELP + " "), UIEmojis.HELP)
    text += t("help.text", lang)
    await message.answer(text)


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext):
    await reset_state(state)
    lang = await get_lang(state)
    await message.answer(
        UIMessages.info_box(t("common.cancelled", lang)),
        reply_markup=UIKeyboards.main_reply_keyboard(lang)
    )


@router.callback_query(F.data == "cancel")
async def cancel_callback(call: CallbackQuery, state: FSMContext):
    await reset_state(state)
    lang = await get_lang(state)
    await call.message.edit_text(UIMessages.info_box(t("common.cancelled", lang)))
    await call.answer()


@router.message(Command("lang"))
async def cmd_lang(message: Message, state: FSMContext):
    """/lang toggles vi <-> en, /lang en sets it explicitly"""
    current = await get_lang(state)
    parts = (message.text or "").split(maxsplit=1)
    if len(parts) > 1 and parts[1].strip().lower() in LANGUAGES:
        lang = parts[1].strip().lower()
    else:
        lang = "en" if current == "vi" else "vi"

    await state.update_data(lang=lang)
    await message.answer(
        UIMessages.success(t("common.language_set", lang)),
        reply_markup=UIKeyboards.main_reply_keyboard(lang)
    )


@router.callback_query(F.data == "ignore")
async def ignore_callback(call: CallbackQuery):
    """Informational buttons"""
    await call.answer()


# --- Non-admins ---

@fallback_router.message(Command("id"))
async def cmd_id(message: Message):
    await message.answer(f"Telegram ID: <code>{message.from_user.id}</code>")


@fallback_router.message()
async def refuse_message(message: Message, state: FSMContext):
    if config.is_admin(message.from_user.id):
        # Admin typed something no handler expects
        await message.answer(UIMessages.info_box(t("help.text", await get_lang(state))))
        return
    await message.answer(UIMessages.error(t("error.not_admin", config.DEFAULT_LANGUAGE)))


@fallback_router.callback_query()
async def refuse_callback(call: CallbackQuery):
    if config.is_admin(call.from_user.id):
        await call.answer()
        return
    await call.answer(t("error.not_admin", config.DEFAULT_LANGUAGE), show_alert=True)
