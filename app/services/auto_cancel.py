"""
Automatic cancellation of overdue pending appointments.

A run scans for pending appointments whose scheduled time is more than the
threshold in the past, cancels them with a conditional update, and deletes
the mechanic quotes attached to the appointments it actually cancelled.

Scan and update failures abort the run. A quote cleanup failure does not:
the appointments are already cancelled, so it is returned as a warning and
left for a later run or manual cleanup.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

from app.exceptions import CancellationError, ScanError
from app.repositories.appointment_store import AppointmentStore
from app.schemas.auto_cancel import OverdueAppointment

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_MINUTES = 15
SYSTEM_ACTOR = "system"
NOTHING_TO_DO_MESSAGE = "No overdue appointments found"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def cancellation_reason(threshold_minutes: int) -> str:
    return f"Automatically cancelled - more than {threshold_minutes} minutes overdue"


@dataclass
class CleanupWarning:
    """A non-fatal problem hit while deleting quotes."""
    appointment_ids: List[str]
    error: str


@dataclass
class AutoCancelOutcome:
    """Result of a completed run."""
    cutoff: datetime
    scanned_count: int
    cancelled_ids: List[str] = field(default_factory=list)
    warnings: List[CleanupWarning] = field(default_factory=list)

    @property
    def cancelled_count(self) -> int:
        return len(self.cancelled_ids)

    @property
    def message(self) -> str:
        if self.scanned_count == 0:
            return NOTHING_TO_DO_MESSAGE
        return f"Successfully eliminated {self.cancelled_count} overdue appointments"

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


async def scan_overdue(store: AppointmentStore, cutoff: datetime) -> List[OverdueAppointment]:
    """Find pending appointments scheduled strictly before ``cutoff``."""
    try:
        overdue = await store.find_overdue(cutoff)
    except Exception as e:
        logger.error(f"❌ Error fetching overdue appointments: {e}")
        raise ScanError(str(e)) from e

    logger.info(f"🔍 Found {len(overdue)} overdue pending appointments")
    return overdue


async def apply_cancellation(
    store: AppointmentStore,
    appointment_ids: Sequence[str],
    cancelled_at: datetime,
    cancelled_by: str = SYSTEM_ACTOR,
    reason: str = cancellation_reason(DEFAULT_THRESHOLD_MINUTES),
) -> List[str]:
    """
    Cancel the given appointments if they are still pending.

    Returns the ids the update actually changed, which can be fewer than
    requested when someone else moved an appointment out of pending first.
    """
    try:
        cancelled_ids = await store.cancel_pending(appointment_ids, cancelled_at, cancelled_by, reason)
    except Exception as e:
        logger.error(f"❌ Error eliminating overdue appointments: {e}")
        raise CancellationError(str(e)) from e

    skipped = len(appointment_ids) - len(cancelled_ids)
    if skipped:
        logger.info(f"ℹ️ {skipped} appointments left pending state before they could be cancelled")
    logger.info(f"✅ Successfully eliminated {len(cancelled_ids)} overdue appointments")
    return cancelled_ids


async def cleanup_quotes(store: AppointmentStore, appointment_ids: Sequence[str]) -> Optional[CleanupWarning]:
    """Delete quotes for cancelled appointments. Never raises."""
    if not appointment_ids:
        return None

    try:
        deleted = await store.delete_quotes(appointment_ids)
    except Exception as e:
        logger.warning(f"⚠️ Error cleaning up mechanic quotes: {e}")
        return CleanupWarning(appointment_ids=list(appointment_ids), error=str(e))

    logger.info(f"🧹 Cleaned up {deleted} associated mechanic quotes")
    return None


class AutoCancelService:
    """Runs scan, cancellation and quote cleanup in order."""

    def __init__(
        self,
        store: AppointmentStore,
        threshold_minutes: int = DEFAULT_THRESHOLD_MINUTES,
        system_actor: str = SYSTEM_ACTOR,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.threshold = timedelta(minutes=threshold_minutes)
        self.reason = cancellation_reason(threshold_minutes)
        self.system_actor = system_actor
        self.clock = clock

    def cutoff(self) -> datetime:
        return self.clock() - self.threshold

    async def preview(self) -> tuple[datetime, List[OverdueAppointment]]:
        """Scan only; nothing is modified."""
        cutoff = self.cutoff()
        return cutoff, await scan_overdue(self.store, cutoff)

    async def run(self) -> AutoCancelOutcome:
        logger.info("🕒 Starting overdue appointment cleanup...")
        cutoff = self.cutoff()
        logger.info(f"🕒 Cutoff time: {cutoff.isoformat()}")

        overdue = await scan_overdue(self.store, cutoff)
        outcome = AutoCancelOutcome(cutoff=cutoff, scanned_count=len(overdue))
        if not overdue:
            return outcome

        for apt in overdue:
            logger.info(
                f"🗑️ Will eliminate appointment {apt.id} scheduled for "
                f"{apt.appointment_date.isoformat()} at {apt.location}"
            )

        outcome.cancelled_ids = await apply_cancellation(
            self.store,
            [apt.id for apt in overdue],
            cancelled_at=self.clock(),
            cancelled_by=self.system_actor,
            reason=self.reason,
        )

        warning = await cleanup_quotes(self.store, outcome.cancelled_ids)
        if warning is not None:
            outcome.warnings.append(warning)

        return outcome
