"""
Database module for the Maps list scraper.

Optional persistence of collected places to Supabase.
"""

from src.db.supabase_client import (
    is_supabase_enabled,
    place_rows,
    upsert_places,
)

__all__ = [
    "is_supabase_enabled",
    "place_rows",
    "upsert_places",
]
