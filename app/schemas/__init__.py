"""
Pydantic schemas for request/response validation.
"""
from app.schemas.auto_cancel import (
    OverdueAppointment,
    OverduePreview,
    AutoCancelSuccess,
    AutoCancelFailure,
)

__all__ = [
    "OverdueAppointment", "OverduePreview",
    "AutoCancelSuccess", "AutoCancelFailure",
]
