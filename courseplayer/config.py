"""
Runtime configuration for CoursePlayer.

Values come from the environment (a local .env file is loaded first).
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Passing score applied when a quiz does not define one
DEFAULT_PASSING_SCORE = 70

# Average quiz score required for a certificate (fixed)
CERTIFICATE_PASSING_SCORE = 70

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class Settings:
    """Environment-backed settings, read at construction time."""

    def __init__(self):
        self.API_BASE_URL: str = os.getenv("API_BASE_URL", "http://127.0.0.1:5000")
        self.API_TOKEN: Optional[str] = os.getenv("API_TOKEN") or None
        self.REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "10"))
        self.MAX_WORKERS: int = int(os.getenv("MAX_WORKERS", "4"))
        course_file = os.getenv("COURSE_FILE")
        self.COURSE_FILE: Optional[Path] = Path(course_file) if course_file else None
        course_id = os.getenv("COURSE_ID")
        self.COURSE_ID: Optional[int] = int(course_id) if course_id else None
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()


def setup_logging(level: Optional[str] = None):
    """Configure root logging once for the application."""
    logging.basicConfig(
        level=getattr(logging, level or settings.LOG_LEVEL, logging.INFO),
        format=LOG_FORMAT,
    )
