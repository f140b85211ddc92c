"""
Pydantic schemas for the auto-cancellation trigger.
"""
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import List, Literal, Optional


class OverdueAppointment(BaseModel):
    """An appointment found by the overdue scan."""
    id: str
    appointment_date: datetime
    location: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class OverduePreview(BaseModel):
    """Dry-run result: what the next run would cancel."""
    cutoff: datetime
    count: int
    appointments: List[OverdueAppointment]


class AutoCancelSuccess(BaseModel):
    """Response body when the run completed."""
    success: Literal[True] = True
    message: str
    eliminatedCount: int
    eliminatedAppointments: List[str] = []


class AutoCancelFailure(BaseModel):
    """Response body for any hard failure."""
    success: Literal[False] = False
    error: str
