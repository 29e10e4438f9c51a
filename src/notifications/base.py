from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from src.models.notification_log import NotificationType


class DeliveryResult(enum.Enum):
    success = "success"
    permanent_failure = "permanent_failure"  # endpoint gone, prune it
    transient_failure = "transient_failure"


@dataclass
class ExpiringCoupon:
    id: str
    user_id: str
    merchant: str
    title: str
    expires_at: datetime
    days_until_expiry: int

    @property
    def notification_type(self) -> NotificationType:
        return NotificationType.for_offset(self.days_until_expiry)


@dataclass
class ReminderSettings:
    remind_7_days: bool = True
    remind_3_days: bool = True
    remind_1_day: bool = True

    def allows(self, notification_type: NotificationType) -> bool:
        return {
            NotificationType.seven_day: self.remind_7_days,
            NotificationType.three_day: self.remind_3_days,
            NotificationType.one_day: self.remind_1_day,
        }[notification_type]


@dataclass
class SubscriptionInfo:
    endpoint: str
    p256dh: str
    auth: str

    def to_webpush(self) -> dict:
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.p256dh, "auth": self.auth},
        }


@dataclass
class NotificationIntent:
    user_id: str
    coupon: ExpiringCoupon
    notification_type: NotificationType
    subscriptions: List[SubscriptionInfo] = field(default_factory=list)


@dataclass
class CycleSummary:
    sent: int = 0
    failed: int = 0
    skipped: int = 0  # intents left unprocessed after the timeout
    timed_out: bool = False

    def as_dict(self) -> dict:
        return {
            "sent": self.sent,
            "failed": self.failed,
            "skipped": self.skipped,
            "timed_out": self.timed_out,
        }
