import unittest
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.models.appointment import Appointment, AppointmentStatus
from app.models.quote import MechanicQuote
from app.repositories.appointment_store import SQLAlchemyAppointmentStore
from app.services.auto_cancel import AutoCancelService

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
CUTOFF = NOW - timedelta(minutes=15)
REASON = "Automatically cancelled - more than 15 minutes overdue"


class TestSQLAlchemyAppointmentStore(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.session = async_sessionmaker(self.engine, expire_on_commit=False)()
        self.store = SQLAlchemyAppointmentStore(self.session)

    async def asyncTearDown(self):
        await self.session.close()
        await self.engine.dispose()

    async def add_appointment(self, appointment_id, appointment_date, status=AppointmentStatus.PENDING):
        self.session.add(Appointment(
            id=appointment_id,
            status=status,
            appointment_date=appointment_date,
            location=f"{appointment_id} Garage Rd",
        ))
        await self.session.commit()

    async def add_quote(self, quote_id, appointment_id):
        self.session.add(MechanicQuote(
            id=quote_id,
            mechanic_id="mech-1",
            appointment_id=appointment_id,
            price=150.0,
            eta="1 hour",
        ))
        await self.session.commit()

    async def status_of(self, appointment_id):
        result = await self.session.execute(
            select(Appointment.status, Appointment.cancelled_by, Appointment.cancellation_reason)
            .where(Appointment.id == appointment_id)
        )
        return result.one()

    async def quote_ids(self):
        result = await self.session.execute(select(MechanicQuote.id).order_by(MechanicQuote.id))
        return list(result.scalars().all())

    async def test_find_overdue_filters_status_and_date(self):
        await self.add_appointment("a-old", NOW - timedelta(minutes=20))
        await self.add_appointment("a-boundary", CUTOFF)
        await self.add_appointment("a-future", NOW + timedelta(days=1))
        await self.add_appointment("a-confirmed", NOW - timedelta(hours=1), AppointmentStatus.CONFIRMED)

        overdue = await self.store.find_overdue(CUTOFF)

        self.assertEqual([apt.id for apt in overdue], ["a-old"])
        self.assertEqual(overdue[0].location, "a-old Garage Rd")

    async def test_cancel_pending_sets_cancellation_fields(self):
        await self.add_appointment("a-1", NOW - timedelta(minutes=20))

        cancelled = await self.store.cancel_pending(["a-1"], NOW, "system", REASON)

        self.assertEqual(cancelled, ["a-1"])
        status, cancelled_by, reason = await self.status_of("a-1")
        self.assertEqual(status, AppointmentStatus.CANCELLED)
        self.assertEqual(cancelled_by, "system")
        self.assertEqual(reason, REASON)

    async def test_cancel_pending_skips_rows_no_longer_pending(self):
        await self.add_appointment("a-1", NOW - timedelta(minutes=20))
        await self.add_appointment("a-2", NOW - timedelta(minutes=20))

        overdue = await self.store.find_overdue(CUTOFF)
        # A mechanic confirms a-2 after the scan
        await self.session.execute(
            update(Appointment)
            .where(Appointment.id == "a-2")
            .values(status=AppointmentStatus.CONFIRMED)
        )
        await self.session.commit()

        cancelled = await self.store.cancel_pending([apt.id for apt in overdue], NOW, "system", REASON)

        self.assertEqual(cancelled, ["a-1"])
        status, cancelled_by, _ = await self.status_of("a-2")
        self.assertEqual(status, AppointmentStatus.CONFIRMED)
        self.assertIsNone(cancelled_by)

    async def test_delete_quotes_by_appointment(self):
        await self.add_appointment("a-1", NOW - timedelta(minutes=20))
        await self.add_appointment("a-2", NOW + timedelta(hours=2))
        await self.add_quote("q-1", "a-1")
        await self.add_quote("q-2", "a-1")
        await self.add_quote("q-3", "a-2")

        deleted = await self.store.delete_quotes(["a-1"])

        self.assertEqual(deleted, 2)
        self.assertEqual(await self.quote_ids(), ["q-3"])

    async def test_full_run_against_database(self):
        await self.add_appointment("a-1", NOW - timedelta(minutes=20))
        await self.add_appointment("a-2", NOW - timedelta(minutes=5))
        await self.add_quote("q-1", "a-1")
        await self.add_quote("q-2", "a-2")
        service = AutoCancelService(self.store, clock=lambda: NOW)

        first = await service.run()
        second = await service.run()

        self.assertEqual(first.cancelled_ids, ["a-1"])
        self.assertEqual(second.cancelled_count, 0)
        self.assertEqual(await self.quote_ids(), ["q-2"])
        status, _, _ = await self.status_of("a-2")
        self.assertEqual(status, AppointmentStatus.PENDING)


if __name__ == "__main__":
    unittest.main()
