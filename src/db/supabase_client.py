# src/db/supabase_client.py
from typing import Any, Dict, List, Optional

from src.core.config import get_config
from src.core.error_logger import get_error_logger
from src.core.error_models import ErrorComponent, ErrorStage, ErrorType
from src.core.logging import get_logger
from src.scraper.models import PlaceRecord
from src.utils.url_utils import extract_domain

logger = get_logger(__name__)

_client = None


def _init_client():
    """
    Lazily create a singleton Supabase client.

    Returns:
        client instance or None if disabled / misconfigured.
    """
    global _client
    if _client is not None:
        return _client

    config = get_config()
    if not config.supabase_enabled:
        logger.debug("Supabase disabled via SUPABASE_ENABLED")
        return None

    if not config.supabase_url or not config.supabase_service_role_key:
        logger.warning("Supabase disabled: SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY missing")
        return None

    try:
        # pip package name is `supabase`
        from supabase import create_client  # type: ignore
    except ImportError:
        logger.warning("supabase client not installed. Run: pip install supabase")
        return None

    _client = create_client(config.supabase_url, config.supabase_service_role_key)
    logger.info(f"Supabase client initialized for {config.supabase_url}")
    return _client


def is_supabase_enabled() -> bool:
    """True if a client can be created and used."""
    return _init_client() is not None


def place_rows(records: List[PlaceRecord], list_url: str, session_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Rows for the places table; ``url`` is the unique key."""
    return [
        {
            "url": r.url,
            "name": r.name,
            "address": r.address,
            "place_id": r.place_id,
            "list_url": list_url,
            "session_id": session_id,
        }
        for r in records
    ]


def upsert_places(records: List[PlaceRecord], list_url: str, session_id: Optional[str] = None) -> int:
    """
    Push collected places into Supabase.

    Fails softly: a database problem never fails the job.

    Returns:
        Number of rows sent, 0 when disabled or on failure
    """
    client = _init_client()
    if client is None:
        return 0

    rows = place_rows(records, list_url, session_id)
    if not rows:
        logger.info(f"No places to upsert for {list_url}")
        return 0

    table = get_config().supabase_places_table
    try:
        # on_conflict=url → de-duplicate by detail-page URL
        logger.info(f"Upserting {len(rows)} places into '{table}'")
        client.table(table).upsert(rows, on_conflict="url").execute()
        return len(rows)
    except Exception as e:
        logger.warning(f"Upsert error ({list_url}): {e}")
        get_error_logger().log_exception(
            e,
            component=ErrorComponent.DATABASE,
            stage=ErrorStage.UPSERT_PLACES,
            domain=extract_domain(list_url) or "unknown",
            url=list_url,
            session_id=session_id,
            error_type=ErrorType.DB_UPSERT_ERROR,
            metadata={"rows": len(rows), "table": table},
        )
        return 0
