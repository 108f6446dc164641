import os
import logging
from dotenv import load_dotenv

load_dotenv()


def _parse_ids(raw):
    """Comma-separated Telegram ids; anything non-numeric is skipped"""
    return [int(x.strip()) for x in (raw or "").split(",") if x.strip().isdigit()]


class Config:
    # Telegram bot token (REQUIRED)
    BOT_TOKEN = os.getenv("BOT_TOKEN")
    if not BOT_TOKEN:
        raise ValueError(
            "BOT_TOKEN is required! Set it in .env file.\n"
            "Get token from @BotFather on Telegram."
        )

    # PostgreSQL parts, used when DATABASE_URL is not set
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASS = os.getenv("DB_PASS", "postgres")
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "motel")
    DB_ECHO = os.getenv("DB_ECHO", "").lower() in ("1", "true", "yes")

    # The motel owner(s) are configured in env; more admins live in the users table.
    # reload_admin_cache() rebuilds ADMIN_IDS / OWNER_IDS from both.
    _env_admin_ids = _parse_ids(os.getenv("ADMIN_IDS"))
    _env_owner_ids = _parse_ids(os.getenv("OWNER_IDS"))
    if not _env_owner_ids:
        raise ValueError(
            "OWNER_IDS is required! Set at least one Telegram ID in .env file.\n"
            "Get your Telegram ID from @userinfobot"
        )

    ADMIN_IDS = list(_env_admin_ids)
    OWNER_IDS = list(_env_owner_ids)

    # Language of chats that never used /lang
    DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "vi").strip().lower()
    if DEFAULT_LANGUAGE not in ("vi", "en"):
        DEFAULT_LANGUAGE = "vi"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def DATABASE_URL(self):
        # DATABASE_URL wins (sqlite+aiosqlite for local runs)
        url = os.getenv("DATABASE_URL")
        if url:
            return url
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASS}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def database_label(self) -> str:
        """Database URL without credentials, for logs"""
        url = self.DATABASE_URL
        return url.split("@", 1)[1] if "@" in url else url

    def is_admin(self, tg_id: int) -> bool:
        return tg_id in self.ADMIN_IDS or tg_id in self.OWNER_IDS


config = Config()

logging.info(f"Motel bot configured with {len(config.OWNER_IDS)} owners, {len(config.ADMIN_IDS)} admins")
logging.info(f"Database: {config.database_label}, default language: {config.DEFAULT_LANGUAGE}")
