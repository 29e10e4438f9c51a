from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from src.config import get_settings
from src.scheduler.jobs import send_expiry_notifications


def create_scheduler() -> BackgroundScheduler:
    settings = get_settings()
    scheduler = BackgroundScheduler()

    # 每日檢查即將到期的優惠券（重疊執行時只保留一個）
    scheduler.add_job(
        send_expiry_notifications,
        CronTrigger(
            hour=settings.notification_cron_hour,
            minute=settings.notification_cron_minute,
        ),
        id="send_expiry_notifications",
        name="Send Expiry Notifications",
        max_instances=1,
        coalesce=True,
    )

    logger.info("Scheduler configured with jobs")
    return scheduler


def start_scheduler():
    scheduler = create_scheduler()
    scheduler.start()
    logger.info("Scheduler started")
    return scheduler
