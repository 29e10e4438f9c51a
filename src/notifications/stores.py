"""Store access for the reminder cycle.

Each method opens its own short-lived session so that scans can run on
separate threads and every write commits on its own.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session, sessionmaker

from src.models import (
    Coupon,
    NotificationLog,
    NotificationStatus,
    NotificationType,
    PushSubscription,
    ReminderPreference,
)
from src.notifications.base import ExpiringCoupon, ReminderSettings, SubscriptionInfo


class CouponStore:
    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def find_expiring_on(self, day_offset: int, today: date) -> List[ExpiringCoupon]:
        """Coupons whose expiry falls on the calendar day ``today + day_offset``."""
        target_start = datetime.combine(today + timedelta(days=day_offset), datetime.min.time())
        target_end = target_start + timedelta(days=1)

        with self.session_factory() as session:
            coupons = (
                session.query(Coupon)
                .filter(
                    Coupon.expires_at >= target_start,
                    Coupon.expires_at < target_end,
                )
                .all()
            )
            return [
                ExpiringCoupon(
                    id=coupon.id,
                    user_id=coupon.user_id,
                    merchant=coupon.merchant,
                    title=coupon.title,
                    expires_at=coupon.expires_at,
                    days_until_expiry=day_offset,
                )
                for coupon in coupons
            ]


class PreferenceStore:
    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def get_preferences(self, user_id: str) -> Optional[ReminderSettings]:
        with self.session_factory() as session:
            pref = session.query(ReminderPreference).filter_by(user_id=user_id).first()
            if pref is None:
                return None
            return ReminderSettings(
                remind_7_days=pref.remind_7_days,
                remind_3_days=pref.remind_3_days,
                remind_1_day=pref.remind_1_day,
            )


class SubscriptionStore:
    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def list_subscriptions(self, user_id: str) -> List[SubscriptionInfo]:
        with self.session_factory() as session:
            subscriptions = session.query(PushSubscription).filter_by(user_id=user_id).all()
            return [
                SubscriptionInfo(endpoint=sub.endpoint, p256dh=sub.p256dh, auth=sub.auth)
                for sub in subscriptions
            ]

    def delete_subscription(self, endpoint: str) -> None:
        """Delete by endpoint; deleting a missing row is a no-op."""
        with self.session_factory() as session:
            session.query(PushSubscription).filter_by(endpoint=endpoint).delete()
            session.commit()


class NotificationLogStore:
    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def find_recent(
        self,
        coupon_id: str,
        notification_type: NotificationType,
        since: datetime,
    ) -> bool:
        with self.session_factory() as session:
            exists = (
                session.query(NotificationLog.id)
                .filter(
                    NotificationLog.coupon_id == coupon_id,
                    NotificationLog.notification_type == notification_type,
                    NotificationLog.sent_at >= since,
                )
                .first()
            )
            return exists is not None

    def create(
        self,
        user_id: str,
        coupon_id: str,
        notification_type: NotificationType,
        status: NotificationStatus,
        sent_at: datetime,
    ) -> Optional[int]:
        with self.session_factory() as session:
            log = NotificationLog(
                user_id=user_id,
                coupon_id=coupon_id,
                notification_type=notification_type,
                status=status,
                sent_at=sent_at,
            )
            session.add(log)
            session.commit()
            return log.id

    def update_status(self, log_id: int, status: NotificationStatus) -> None:
        with self.session_factory() as session:
            session.query(NotificationLog).filter_by(id=log_id).update({"status": status})
            session.commit()
