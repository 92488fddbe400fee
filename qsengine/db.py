# qsengine/db.py
from __future__ import annotations
import logging
import os
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine
from dotenv import load_dotenv

from qsengine.sqlalchemy_store import SQLAlchemyStore


class Settings:
    DATABASE_URL: str
    LOG_LEVEL: str
    ECHO: bool

    def __init__(self) -> None:
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./app.db")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ECHO = os.getenv("DATABASE_ECHO") == "1"


@lru_cache
def get_settings() -> Settings:
    load_dotenv()
    return Settings()


def create_store(url: Optional[str] = None) -> SQLAlchemyStore:
    """Store over a fresh engine for `url` (default: DATABASE_URL)."""
    settings = get_settings()
    logging.getLogger("qsengine").setLevel(settings.LOG_LEVEL)
    engine = create_engine(url or settings.DATABASE_URL, pool_pre_ping=True, echo=settings.ECHO)
    return SQLAlchemyStore(engine)
