from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings


def _connect_args(database_url: str, timeout: int) -> dict:
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout}
    if database_url.startswith("postgresql"):
        return {"connect_timeout": timeout}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL, settings.DB_TIMEOUT_SECONDS),
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()

def init_db():
    # Import here so the users table is registered on Base before create_all
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
