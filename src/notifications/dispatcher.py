from __future__ import annotations

from concurrent.futures import Executor
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from loguru import logger

from src.models.notification_log import NotificationStatus
from src.notifications.base import DeliveryResult, NotificationIntent, SubscriptionInfo
from src.notifications.formatter import format_expiry_notification
from src.notifications.stores import NotificationLogStore, SubscriptionStore
from src.notifications.webpush import WebPushSender


class NotificationDispatcher:
    """Delivers one reminder to all of a user's subscriptions and records the outcome."""

    def __init__(
        self,
        subscription_store: SubscriptionStore,
        log_store: NotificationLogStore,
        sender: WebPushSender,
        executor: Executor,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.subscription_store = subscription_store
        self.log_store = log_store
        self.sender = sender
        self.executor = executor
        self.clock = clock

    def _log_attempt(self, intent: NotificationIntent) -> Optional[int]:
        """Write the log entry as sent before delivery so its id can ride in the payload."""
        try:
            return self.log_store.create(
                user_id=intent.user_id,
                coupon_id=intent.coupon.id,
                notification_type=intent.notification_type,
                status=NotificationStatus.sent,
                sent_at=self.clock(),
            )
        except Exception as e:
            logger.error(
                f"Failed to log {intent.notification_type.value} reminder "
                f"for coupon {intent.coupon.id}: {e}"
            )
            return None

    def _mark_failed(self, log_id: int) -> None:
        try:
            self.log_store.update_status(log_id, NotificationStatus.failed)
        except Exception as e:
            logger.error(f"Failed to mark notification log {log_id} as failed: {e}")

    def _prune(self, subscription: SubscriptionInfo, user_id: str) -> None:
        try:
            self.subscription_store.delete_subscription(subscription.endpoint)
            logger.info(f"Removed expired push subscription for user {user_id}")
        except Exception as e:
            logger.error(f"Failed to remove push subscription for user {user_id}: {e}")

    def _deliver(self, intent: NotificationIntent, payload: Dict[str, Any]) -> bool:
        futures = [
            (subscription, self.executor.submit(self.sender.send, subscription, payload))
            for subscription in intent.subscriptions
        ]

        delivered = False
        for subscription, future in futures:
            try:
                result = future.result()
            except Exception as e:
                logger.error(f"Push delivery raised for user {intent.user_id}: {e}")
                result = DeliveryResult.transient_failure

            if result is DeliveryResult.success:
                delivered = True
            elif result is DeliveryResult.permanent_failure:
                self._prune(subscription, intent.user_id)

        return delivered

    def dispatch(self, intent: NotificationIntent) -> bool:
        """Send one reminder.

        Returns:
            True if at least one subscription accepted the push.
        """
        log_id = self._log_attempt(intent)
        payload = format_expiry_notification(intent.coupon, log_id)

        delivered = self._deliver(intent, payload)

        if not delivered and log_id is not None:
            self._mark_failed(log_id)

        if delivered:
            logger.info(
                f"Sent {intent.notification_type.value} reminder for coupon "
                f"{intent.coupon.id} to user {intent.user_id}"
            )
        else:
            logger.warning(
                f"Failed to deliver {intent.notification_type.value} reminder for coupon "
                f"{intent.coupon.id} to any of {len(intent.subscriptions)} subscriptions"
            )
        return delivered
