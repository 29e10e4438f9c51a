from src.models.coupon import Coupon
from src.models.notification_log import (
    NotificationLog,
    NotificationStatus,
    NotificationType,
)
from src.models.push_subscription import PushSubscription
from src.models.reminder_preference import ReminderPreference

__all__ = [
    "Coupon",
    "NotificationLog",
    "NotificationStatus",
    "NotificationType",
    "PushSubscription",
    "ReminderPreference",
]
