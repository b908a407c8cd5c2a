"""Runtime settings for the hosted book table."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TABLE = "books"
DEFAULT_COVER_URL = (
    "https://images.unsplash.com/photo-1543002588-bfa74002ed7e"
    "?auto=format&fit=crop&w=200&q=80"
)
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    supabase_url: str = ""
    supabase_key: str = ""
    table: str = DEFAULT_TABLE
    default_cover_url: str = DEFAULT_COVER_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> Settings:
        """Read settings from the environment.

        URL and key are not checked here; a missing value surfaces as a
        failed remote call.
        """
        return cls(
            supabase_url=os.environ.get("SUPABASE_URL", "").rstrip("/"),
            supabase_key=os.environ.get("SUPABASE_KEY", ""),
            table=os.environ.get("BOOKS_TABLE", DEFAULT_TABLE),
            default_cover_url=os.environ.get("DEFAULT_COVER_URL", DEFAULT_COVER_URL),
            timeout=float(os.environ.get("REMOTE_TIMEOUT", DEFAULT_TIMEOUT)),
        )
