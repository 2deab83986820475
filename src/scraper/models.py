"""
Pydantic models for scraped places and progress reporting.

PlaceRecord is the unit of output; ProgressSnapshot is what the traversal
engine emits on every state change.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobStatus(str, Enum):
    """Lifecycle of one extraction job."""
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.RUNNING


class PlaceRecord(BaseModel):
    """
    One place collected from a confirmed, non-duplicate detail page.

    The record is immutable; ``url`` is its identity for de-duplication.
    Serialized with the ``placeId`` key to match the HTTP contract.
    """
    name: Optional[str] = Field(None, description="Place name")
    url: str = Field(..., min_length=1, description="Canonical detail-page URL")
    address: Optional[str] = Field(None, description="Address text shown on the detail page")
    place_id: Optional[str] = Field(None, alias="placeId", description="Hex place identifier from the URL")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    @field_validator("name", "address")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty text as missing."""
        if v is None or not v.strip():
            return None
        return v

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class ProgressSnapshot(BaseModel):
    """
    Latest view of a job's progress.

    A newer snapshot fully supersedes the previous one.
    """
    current: int = Field(0, ge=0, description="Places collected so far")
    total: int = Field(0, ge=0, description="Target number of entries")
    message: str = Field("", description="Human-readable status line")
    status: JobStatus = Field(JobStatus.RUNNING, description="Job status")
    results: Optional[List[PlaceRecord]] = Field(None, description="Full results on terminal snapshots")
    error: Optional[str] = Field(None, description="Error message on failure")

    model_config = ConfigDict(frozen=True)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
