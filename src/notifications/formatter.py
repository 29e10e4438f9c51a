from __future__ import annotations

from typing import Any, Dict, Optional

from src.config import get_settings
from src.notifications.base import ExpiringCoupon

NOTIFICATION_TITLE = "Coupon Expiring Soon"


def coupon_tag(coupon_id: str) -> str:
    """Stable per-coupon tag so a newer reminder replaces the older one on the device."""
    return f"coupon-expiry-{coupon_id}"


def format_expiry_body(coupon: ExpiringCoupon) -> str:
    days = coupon.days_until_expiry
    unit = "day" if days == 1 else "days"
    return f'Your {coupon.merchant} coupon "{coupon.title}" expires in {days} {unit}!'


def format_expiry_notification(
    coupon: ExpiringCoupon, notification_log_id: Optional[int] = None
) -> Dict[str, Any]:
    """Build the push payload read by the service worker.

    ``notificationLogId`` is only present when the log entry was written, so
    the click handler can report back which reminder was opened.
    """
    settings = get_settings()

    data: Dict[str, Any] = {
        "url": settings.notification_url,
        "couponId": coupon.id,
    }
    if notification_log_id is not None:
        data["notificationLogId"] = notification_log_id

    return {
        "title": NOTIFICATION_TITLE,
        "body": format_expiry_body(coupon),
        "icon": settings.notification_icon,
        "badge": settings.notification_badge,
        "tag": coupon_tag(coupon.id),
        "data": data,
    }
