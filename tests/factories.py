from datetime import datetime

from src.models import Coupon, PushSubscription, ReminderPreference

NOW = datetime(2026, 3, 10, 9, 0)


def add_coupon(session, coupon_id, user_id, expires_at, merchant="Acme", title="20% off"):
    coupon = Coupon(
        id=coupon_id,
        user_id=user_id,
        merchant=merchant,
        title=title,
        expires_at=expires_at,
    )
    session.add(coupon)
    session.commit()
    return coupon


def add_subscription(session, user_id, endpoint):
    sub = PushSubscription(user_id=user_id, endpoint=endpoint, p256dh="p256dh-key", auth="auth-key")
    session.add(sub)
    session.commit()
    return sub


def add_preferences(session, user_id, remind_7_days=True, remind_3_days=True, remind_1_day=True):
    pref = ReminderPreference(
        user_id=user_id,
        remind_7_days=remind_7_days,
        remind_3_days=remind_3_days,
        remind_1_day=remind_1_day,
    )
    session.add(pref)
    session.commit()
    return pref
