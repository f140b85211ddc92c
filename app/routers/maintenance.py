"""
Maintenance routes triggered by an external scheduler.
"""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import require_service_role
from app.config import Settings, get_settings
from app.database import get_db
from app.exceptions import AutoCancelError
from app.repositories.appointment_store import AppointmentStore, SQLAlchemyAppointmentStore
from app.schemas.auto_cancel import AutoCancelFailure, AutoCancelSuccess, OverduePreview
from app.services.auto_cancel import AutoCancelService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/maintenance", tags=["maintenance"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


async def get_appointment_store(db: AsyncSession = Depends(get_db)) -> AppointmentStore:
    return SQLAlchemyAppointmentStore(db)


async def get_auto_cancel_service(
    store: AppointmentStore = Depends(get_appointment_store),
    settings: Settings = Depends(get_settings),
) -> AutoCancelService:
    return AutoCancelService(
        store,
        threshold_minutes=settings.overdue_threshold_minutes,
        system_actor=settings.system_actor,
    )


def failure_response(message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=AutoCancelFailure(error=message).model_dump(),
        headers=CORS_HEADERS,
    )


@router.options("/auto-cancel-appointments", include_in_schema=False)
async def auto_cancel_preflight():
    """Answer CORS preflight for manual and browser testing."""
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@router.post(
    "/auto-cancel-appointments",
    response_model=AutoCancelSuccess,
    responses={500: {"model": AutoCancelFailure}, 401: {"model": AutoCancelFailure}},
    dependencies=[Depends(require_service_role)],
)
async def auto_cancel_appointments(
    service: AutoCancelService = Depends(get_auto_cancel_service),
):
    """
    Cancel pending appointments more than the threshold overdue and delete
    their mechanic quotes.
    """
    logger.info("🕒 API route: Auto-cancelling overdue appointments...")

    try:
        outcome = await service.run()
    except AutoCancelError as e:
        return failure_response(e.message)
    except Exception as e:
        logger.exception("❌ Error in auto-cancel route")
        return failure_response(str(e) or "Unknown error occurred")

    result = AutoCancelSuccess(
        message=outcome.message,
        eliminatedCount=outcome.cancelled_count,
        eliminatedAppointments=outcome.cancelled_ids,
    )
    logger.info(f"✅ Auto-cancel result: {result.model_dump()}")

    headers = dict(CORS_HEADERS)
    if outcome.has_warnings:
        headers["X-Cleanup-Warnings"] = str(len(outcome.warnings))

    return JSONResponse(content=result.model_dump(), headers=headers)


@router.get(
    "/overdue-appointments",
    response_model=OverduePreview,
    responses={500: {"model": AutoCancelFailure}, 401: {"model": AutoCancelFailure}},
    dependencies=[Depends(require_service_role)],
)
async def preview_overdue_appointments(
    service: AutoCancelService = Depends(get_auto_cancel_service),
):
    """
    List the appointments the next run would cancel, without changing them.
    """
    try:
        cutoff, overdue = await service.preview()
    except AutoCancelError as e:
        return failure_response(e.message)

    return OverduePreview(cutoff=cutoff, count=len(overdue), appointments=overdue)
