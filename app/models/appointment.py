"""
Appointment model for database.
"""
import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class AppointmentStatus(str, enum.Enum):
    """Appointment status enumeration."""
    PENDING = "pending"
    QUOTED = "quoted"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Appointment(Base):
    """Appointment database model."""

    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    status = Column(
        SQLEnum(AppointmentStatus, name="appointment_status", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=AppointmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    appointment_date = Column(DateTime(timezone=True), nullable=False, index=True)
    location = Column(String, nullable=True)
    issue_description = Column(Text, nullable=True)
    selected_mechanic_id = Column(String(36), nullable=True)

    # Populated only by the cancellation path
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(String, nullable=True)
    cancellation_reason = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    quotes = relationship("MechanicQuote", back_populates="appointment", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Appointment {self.id} - {self.appointment_date} ({self.status})>"
