from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List

from loguru import logger

from src.notifications.base import ExpiringCoupon, NotificationIntent, ReminderSettings
from src.notifications.stores import NotificationLogStore, PreferenceStore, SubscriptionStore

DEFAULT_DEDUP_WINDOW = timedelta(hours=24)


class NotificationPlanner:
    """Turns expiring coupons into reminders that should actually be sent.

    A coupon survives when its owner wants a reminder at that lead time, has
    somewhere to receive it, and was not already reminded within the dedup
    window.
    """

    def __init__(
        self,
        preference_store: PreferenceStore,
        subscription_store: SubscriptionStore,
        log_store: NotificationLogStore,
        dedup_window: timedelta = DEFAULT_DEDUP_WINDOW,
    ):
        self.preference_store = preference_store
        self.subscription_store = subscription_store
        self.log_store = log_store
        self.dedup_window = dedup_window

    def _already_notified(self, coupon: ExpiringCoupon, since: datetime) -> bool:
        try:
            return self.log_store.find_recent(coupon.id, coupon.notification_type, since)
        except Exception as e:
            # Skipping is safer than risking a duplicate push
            logger.error(f"Error checking notification log for coupon {coupon.id}: {e}")
            return True

    def _plan_user(
        self, user_id: str, coupons: List[ExpiringCoupon], since: datetime
    ) -> List[NotificationIntent]:
        try:
            preferences = self.preference_store.get_preferences(user_id)
            subscriptions = self.subscription_store.list_subscriptions(user_id)
        except Exception as e:
            logger.error(f"Error loading reminder settings for user {user_id}: {e}")
            return []

        if preferences is None:
            preferences = ReminderSettings()

        wanted = [c for c in coupons if preferences.allows(c.notification_type)]
        if not wanted:
            return []

        if not subscriptions:
            logger.debug(f"No push subscriptions for user {user_id}")
            return []

        intents = []
        for coupon in wanted:
            if self._already_notified(coupon, since):
                logger.info(
                    f"Notification already sent for coupon {coupon.id} "
                    f"({coupon.notification_type.value})"
                )
                continue
            intents.append(
                NotificationIntent(
                    user_id=user_id,
                    coupon=coupon,
                    notification_type=coupon.notification_type,
                    subscriptions=list(subscriptions),
                )
            )
        return intents

    def plan(self, coupons: List[ExpiringCoupon], now: datetime) -> List[NotificationIntent]:
        by_user: Dict[str, List[ExpiringCoupon]] = defaultdict(list)
        for coupon in coupons:
            by_user[coupon.user_id].append(coupon)

        since = now - self.dedup_window
        intents: List[NotificationIntent] = []
        for user_id, user_coupons in by_user.items():
            intents.extend(self._plan_user(user_id, user_coupons, since))

        logger.info(f"Planned {len(intents)} reminders for {len(by_user)} users")
        return intents
