"""
Persistence access used by the auto-cancellation run.

The service only talks to an AppointmentStore, so tests can hand it an
in-memory fake instead of a database session.
"""
import logging
from datetime import datetime
from typing import List, Protocol, Sequence

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment, AppointmentStatus
from app.models.quote import MechanicQuote
from app.schemas.auto_cancel import OverdueAppointment

logger = logging.getLogger(__name__)


class AppointmentStore(Protocol):
    """The three persistence calls the run depends on."""

    async def find_overdue(self, cutoff: datetime) -> List[OverdueAppointment]:
        """Pending appointments scheduled strictly before ``cutoff``."""
        ...

    async def cancel_pending(
        self,
        appointment_ids: Sequence[str],
        cancelled_at: datetime,
        cancelled_by: str,
        reason: str,
    ) -> List[str]:
        """Cancel the given ids that are still pending; return the ids changed."""
        ...

    async def delete_quotes(self, appointment_ids: Sequence[str]) -> int:
        """Delete quotes referencing the given appointments; return rows deleted."""
        ...


class SQLAlchemyAppointmentStore:
    """AppointmentStore backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_overdue(self, cutoff: datetime) -> List[OverdueAppointment]:
        result = await self.session.execute(
            select(Appointment.id, Appointment.appointment_date, Appointment.location)
            .where(Appointment.status == AppointmentStatus.PENDING)
            .where(Appointment.appointment_date < cutoff)
            .order_by(Appointment.appointment_date)
        )
        return [OverdueAppointment.model_validate(row) for row in result.all()]

    async def cancel_pending(
        self,
        appointment_ids: Sequence[str],
        cancelled_at: datetime,
        cancelled_by: str,
        reason: str,
    ) -> List[str]:
        # Re-checking the status makes the update lose against anyone who
        # confirmed or cancelled the appointment after the scan.
        stmt = (
            update(Appointment)
            .where(Appointment.id.in_(list(appointment_ids)))
            .where(Appointment.status == AppointmentStatus.PENDING)
            .values(
                status=AppointmentStatus.CANCELLED,
                cancelled_at=cancelled_at,
                cancelled_by=cancelled_by,
                cancellation_reason=reason,
            )
            .returning(Appointment.id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            cancelled_ids = list(result.scalars().all())
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        return cancelled_ids

    async def delete_quotes(self, appointment_ids: Sequence[str]) -> int:
        stmt = (
            delete(MechanicQuote)
            .where(MechanicQuote.appointment_id.in_(list(appointment_ids)))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        return result.rowcount or 0
