"""
SQLAlchemy database models.
"""
from app.models.appointment import Appointment, AppointmentStatus
from app.models.quote import MechanicQuote, QuoteStatus

__all__ = ["Appointment", "AppointmentStatus", "MechanicQuote", "QuoteStatus"]
