# database.py
import logging
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from jobboard.config import build_sqlalchemy_db_url, settings


logger = logging.getLogger("uvicorn.error")


def _build_connect_args(db_url: str) -> dict:
    if db_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def mask_db_url(db_url: str) -> str:
    try:
        return str(make_url(db_url).set(password="***"))
    except Exception:
        return db_url


_db_url = build_sqlalchemy_db_url(settings)
engine = create_engine(_db_url, pool_pre_ping=True, future=True, connect_args=_build_connect_args(_db_url))
logger.info("SQLAlchemy ORM db_url=%s", mask_db_url(_db_url))

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
Base = declarative_base()

# Last observed connectivity, refreshed by check_connection().
_is_connected = False


def get_db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def check_connection() -> bool:
    global _is_connected
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        _is_connected = True
    except SQLAlchemyError as exc:
        logger.error("Database connectivity check failed: %s", exc)
        _is_connected = False
    return _is_connected


def is_connected() -> bool:
    return _is_connected
