"""
Request and response schemas for the scrape API.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ScrapeRequest(BaseModel):
    """Body of ``POST /api/scrape``. ``listUrl`` presence is checked by the route."""
    list_url: Optional[str] = Field(None, alias="listUrl")
    max_items: Optional[int] = Field(None, alias="maxItems", ge=1)

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class ScrapeAccepted(BaseModel):
    session_id: str = Field(..., alias="sessionId")

    model_config = ConfigDict(populate_by_name=True)


class SessionStatus(BaseModel):
    """Body of ``GET /api/status/{id}``."""
    status: str
    progress: int
    total: int
    message: str
    results: Optional[List[Dict[str, Any]]] = None
    error: Optional[str] = None


class CancelResponse(BaseModel):
    session_id: str = Field(..., alias="sessionId")
    status: str

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    error: str
