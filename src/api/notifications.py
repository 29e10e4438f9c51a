from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import get_settings
from src.db.database import get_db
from src.models.notification_log import NotificationLog, NotificationStatus
from src.scheduler.jobs import run_expiry_notifications

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


class ClickRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notification_log_id: int = Field(alias="notificationLogId")


def verify_admin_key(x_admin_key: str = Header(None)) -> None:
    # Admin key is only enforced in production
    settings = get_settings()
    if settings.is_production:
        if not settings.admin_api_key:
            raise HTTPException(status_code=503, detail="Admin API not configured")
        if x_admin_key != settings.admin_api_key:
            raise HTTPException(status_code=401, detail="Invalid admin key")


@router.post("/click")
async def record_click(body: ClickRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(NotificationLog).where(NotificationLog.id == body.notification_log_id)
    )
    log = result.scalar_one_or_none()
    if log is None:
        raise HTTPException(status_code=404, detail="Notification log not found")

    if log.status == NotificationStatus.failed:
        raise HTTPException(status_code=409, detail="Notification was never delivered")

    if log.status != NotificationStatus.clicked:
        log.status = NotificationStatus.clicked
        await db.commit()

    return {"success": True}


@router.post("/run", dependencies=[Depends(verify_admin_key)])
async def run_notifications():
    try:
        summary = await run_in_threadpool(run_expiry_notifications)
    except Exception as e:
        logger.error(f"Error in notification cron job: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e), "sent": 0, "failed": 0},
        )

    return {"success": True, **summary.as_dict()}
