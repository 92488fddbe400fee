# qsgen/settings.py
from __future__ import annotations
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


class Settings:
    LOG_LEVEL: str
    JOBS: int
    MODEL_SCHEMA: Optional[str]

    def __init__(self) -> None:
        self.LOG_LEVEL = os.getenv("QSGEN_LOG_LEVEL", "INFO").upper()
        self.JOBS = max(1, int(os.getenv("QSGEN_JOBS", "1")))
        self.MODEL_SCHEMA = os.getenv("QSGEN_MODEL_SCHEMA") or None


@lru_cache
def get_settings() -> Settings:
    load_dotenv()
    return Settings()
