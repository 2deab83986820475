"""
Pydantic model for a tracked extraction session.
"""

import time
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from src.scraper.models import JobStatus, PlaceRecord, ProgressSnapshot


class Session(BaseModel):
    """
    Latest known state of one job.

    Folded from ProgressSnapshot events; fields are overwritten, never merged.
    """
    session_id: str = Field(..., min_length=1)
    status: JobStatus = JobStatus.RUNNING
    progress: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    message: str = ""
    results: Optional[List[PlaceRecord]] = None
    error: Optional[str] = None

    created_at: float = Field(default_factory=time.monotonic)
    updated_at: float = Field(default_factory=time.monotonic)
    finished_at: Optional[float] = None

    model_config = ConfigDict(validate_assignment=True)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def apply(self, snapshot: ProgressSnapshot, now: float) -> None:
        self.progress = snapshot.current
        self.total = snapshot.total
        self.message = snapshot.message
        self.status = snapshot.status
        if snapshot.results is not None:
            self.results = list(snapshot.results)
        if snapshot.error is not None:
            self.error = snapshot.error
        self.updated_at = now
        if self.is_terminal:
            self.finished_at = now

    def to_public(self) -> Dict[str, Any]:
        """Status payload served to pollers; absent optional fields are omitted."""
        body: Dict[str, Any] = {
            "status": self.status.value,
            "progress": self.progress,
            "total": self.total,
            "message": self.message,
        }
        if self.results is not None:
            body["results"] = [r.to_dict() for r in self.results]
        if self.error is not None:
            body["error"] = self.error
        return body
