"""
Centralized error logging system with Supabase integration.

This module provides a fail-safe error logger that:
- Logs errors to Supabase with structured schema
- Falls back to local file logging on database failures
- Uses Pydantic validation for type safety
- Follows singleton pattern for global access
"""

import os
import json
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from src.core.config import get_config
from src.core.logging import get_logger
from src.core.error_models import (
    ErrorRecord,
    ErrorComponent,
    ErrorSeverity,
    ErrorType,
)

logger = get_logger(__name__)

# Singleton instance
_error_logger: Optional["ErrorLogger"] = None


class ErrorLogger:
    """
    Centralized error logger with database and file fallback.

    Usage:
        >>> error_logger = get_error_logger()
        >>> error_logger.log_error(
        ...     component=ErrorComponent.SCRAPER,
        ...     stage=ErrorStage.WAIT_FOR_LIST,
        ...     error_type=ErrorType.TIMEOUT,
        ...     domain="www.google.com",
        ...     message="List container did not appear within 15000ms",
        ...     session_id="session_1700000000000_ab12cd34e",
        ... )
    """

    def __init__(self, fallback_dir: Optional[Path] = None):
        """Initialize error logger with database connection."""
        config = get_config()
        self._client = None
        self._db_available = False
        self._table = os.getenv("ERROR_LOG_TABLE", "error_logs")
        self._fallback_dir = fallback_dir or Path(
            os.getenv("ERROR_LOG_FALLBACK_DIR", str(config.log_dir / "errors"))
        )
        self._fallback_dir.mkdir(exist_ok=True, parents=True)

        if config.supabase_enabled:
            self._init_database(config.supabase_url, config.supabase_service_role_key)

    def _init_database(self, url: Optional[str], key: Optional[str]) -> None:
        """Initialize Supabase client for error logging."""
        try:
            from supabase import create_client

            if not url or not key:
                logger.warning("Error logging: Supabase credentials missing, using file fallback")
                return

            self._client = create_client(url, key)
            self._db_available = True
            logger.info("Error logging initialized with Supabase")

        except ImportError:
            logger.warning("Error logging: supabase package not installed, using file fallback")
        except Exception as e:
            logger.warning(f"Error logging: Database init failed ({e}), using file fallback")

    @property
    def fallback_dir(self) -> Path:
        return self._fallback_dir

    def log_error(
        self,
        component: ErrorComponent,
        stage: str,
        error_type: ErrorType,
        domain: str,
        message: str,
        url: Optional[str] = None,
        session_id: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Log an error record.

        This method never raises exceptions - it will fall back to file logging
        if database write fails.

        Returns:
            True if logged successfully, False otherwise
        """
        try:
            record = ErrorRecord(
                component=component,
                stage=stage,
                error_type=error_type,
                severity=severity,
                domain=domain or "unknown",
                url=url,
                session_id=session_id,
                message=message,
                metadata=metadata or {},
            )
            return self._write(record)

        except Exception as e:
            # Fail-safe: If error logging itself fails, log to standard logger
            logger.error(f"Error logger failed: {e} - Original error: {message}")
            return False

    def log_exception(
        self,
        exc: BaseException,
        component: ErrorComponent,
        stage: str,
        domain: str,
        url: Optional[str] = None,
        session_id: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        error_type: Optional[ErrorType] = None,
        include_stack_trace: Optional[bool] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Log an exception with automatic classification.

        Uses ErrorRecord.from_exception() to extract error details.

        Returns:
            True if logged successfully, False otherwise
        """
        try:
            record = ErrorRecord.from_exception(
                exc=exc,
                component=component,
                stage=stage,
                domain=domain,
                url=url,
                session_id=session_id,
                severity=severity,
                error_type=error_type,
                include_stack_trace=include_stack_trace,
                metadata=metadata,
            )
            return self._write(record)

        except Exception as e:
            logger.error(f"Error logger failed: {e} - Original exception: {type(exc).__name__}")
            return False

    def _write(self, record: ErrorRecord) -> bool:
        if self._db_available and self._client:
            return self._write_to_database(record)
        return self._write_to_file(record)

    def _write_to_database(self, record: ErrorRecord) -> bool:
        """Write error record to Supabase."""
        try:
            row = record.model_dump(exclude_none=False)
            self._client.table(self._table).insert(row).execute()
            return True
        except Exception as e:
            logger.warning(f"Database error write failed: {e}, falling back to file")
            return self._write_to_file(record)

    def _write_to_file(self, record: ErrorRecord) -> bool:
        """Write error record to local JSON file (fallback)."""
        try:
            date_str = datetime.now(timezone.utc).strftime("%Y%m%d")
            file_path = self._fallback_dir / f"errors_{date_str}.jsonl"

            with open(file_path, "a", encoding="utf-8") as f:
                json.dump(record.model_dump(), f)
                f.write("\n")

            return True
        except Exception as e:
            logger.error(f"File error write failed: {e}")
            return False


# Singleton accessor
def get_error_logger() -> ErrorLogger:
    """
    Get the global ErrorLogger instance.

    Returns:
        Global ErrorLogger singleton
    """
    global _error_logger
    if _error_logger is None:
        _error_logger = ErrorLogger()
    return _error_logger
