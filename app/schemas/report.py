"""Report schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional
from datetime import datetime


class ReportCreate(BaseModel):
    """Schema for filing a report."""

    target_type: Literal["user", "venue", "booking"]
    target_id: int
    reason: Optional[str] = Field(default=None, max_length=1000)


class ReportUpdate(BaseModel):
    """Schema for an admin acting on a report."""

    status: Optional[Literal["open", "in_review", "resolved"]] = None
    action_note: Optional[str] = None


class ReportInDB(BaseModel):
    """Schema for report from database."""

    id: int
    reporter_id: int
    target_type: str
    target_id: int
    reason: Optional[str] = None
    status: str
    action_note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
