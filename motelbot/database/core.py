from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from motelbot.config import config

engine = create_async_engine(config.DATABASE_URL, echo=config.DB_ECHO)

# Objects stay readable after a service commits
AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    pass
