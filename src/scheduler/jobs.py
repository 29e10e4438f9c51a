from __future__ import annotations

from loguru import logger

from src.config import get_settings
from src.db.database import get_sync_session_factory
from src.notifications.base import CycleSummary
from src.notifications.webpush import WebPushSender
from src.reminders.cycle import run_notification_cycle


def run_expiry_notifications() -> CycleSummary:
    """執行一次到期提醒（錯誤會往上拋，給 API / CLI 使用）"""
    settings = get_settings()
    if not settings.notification_enabled:
        logger.info("Notifications are disabled, skipping reminder cycle")
        return CycleSummary()

    if not WebPushSender.is_configured():
        logger.warning("VAPID keys not configured, skipping reminder cycle")
        return CycleSummary()

    return run_notification_cycle(get_sync_session_factory())


def send_expiry_notifications() -> CycleSummary:
    """每日排程：檢查即將到期的優惠券並推播提醒"""
    logger.info("Checking for expiring coupons to notify")
    try:
        summary = run_expiry_notifications()
    except Exception as e:
        logger.error(f"Error in expiry reminder job: {e}")
        return CycleSummary()

    logger.info(f"Expiry reminder results: {summary.as_dict()}")
    return summary
