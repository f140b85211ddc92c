"""
Mechanic quote model for database.
"""
import enum
import uuid

from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class QuoteStatus(str, enum.Enum):
    """Quote status enumeration."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class MechanicQuote(Base):
    """Quote a mechanic submitted for an appointment."""

    __tablename__ = "mechanic_quotes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    mechanic_id = Column(String(36), nullable=False, index=True)
    appointment_id = Column(String(36), ForeignKey("appointments.id"), nullable=False, index=True)
    price = Column(Float, nullable=False)
    eta = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    status = Column(
        SQLEnum(QuoteStatus, name="quote_status", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=QuoteStatus.PENDING,
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    appointment = relationship("Appointment", back_populates="quotes")
