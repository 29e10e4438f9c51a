"""One pass of the expiry reminder job: scan -> plan -> deliver -> record."""
from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from loguru import logger
from sqlalchemy.orm import Session, sessionmaker

from src.config import get_settings
from src.notifications.base import CycleSummary
from src.notifications.dispatcher import NotificationDispatcher
from src.notifications.stores import (
    CouponStore,
    NotificationLogStore,
    PreferenceStore,
    SubscriptionStore,
)
from src.notifications.webpush import WebPushSender
from src.reminders.planner import NotificationPlanner
from src.reminders.scanner import scan_expiring_coupons


def run_notification_cycle(
    session_factory: sessionmaker[Session],
    sender: Optional[WebPushSender] = None,
    offsets: Optional[Sequence[int]] = None,
    clock: Callable[[], datetime] = datetime.now,
    timeout: Optional[float] = None,
) -> CycleSummary:
    """Send every reminder that is due right now.

    Raises:
        NotificationJobError: the coupon store could not be read at all.
    """
    settings = get_settings()
    if offsets is None:
        offsets = settings.offsets
    if timeout is None:
        timeout = settings.notification_job_timeout_seconds
    if sender is None:
        sender = WebPushSender()

    deadline = time.monotonic() + timeout
    now = clock()
    logger.info(f"Starting expiry reminder cycle at {now} for offsets {list(offsets)}")

    coupons = scan_expiring_coupons(CouponStore(session_factory), offsets, now.date())
    if not coupons:
        logger.info("No coupons expiring soon")
        return CycleSummary()

    subscription_store = SubscriptionStore(session_factory)
    log_store = NotificationLogStore(session_factory)
    planner = NotificationPlanner(
        PreferenceStore(session_factory),
        subscription_store,
        log_store,
        dedup_window=timedelta(hours=settings.dedup_window_hours),
    )
    intents = planner.plan(coupons, now)

    summary = CycleSummary()
    with ThreadPoolExecutor(max_workers=settings.push_max_workers) as pool:
        dispatcher = NotificationDispatcher(
            subscription_store, log_store, sender, pool, clock=clock
        )
        for index, intent in enumerate(intents):
            if time.monotonic() >= deadline:
                summary.timed_out = True
                summary.skipped = len(intents) - index
                logger.warning(
                    f"Reminder cycle timed out after {timeout}s, "
                    f"leaving {summary.skipped} reminders for the next run"
                )
                break
            if dispatcher.dispatch(intent):
                summary.sent += 1
            else:
                summary.failed += 1

    logger.info(
        f"Notification job complete: {summary.sent} sent, {summary.failed} failed"
    )
    return summary
