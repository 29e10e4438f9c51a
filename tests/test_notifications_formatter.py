from datetime import datetime

from src.notifications.base import ExpiringCoupon
from src.notifications.formatter import (
    NOTIFICATION_TITLE,
    coupon_tag,
    format_expiry_body,
    format_expiry_notification,
)


def _coupon(days=7):
    return ExpiringCoupon(
        id="c1",
        user_id="u1",
        merchant="Starbucks",
        title="Free drink",
        expires_at=datetime(2026, 3, 17),
        days_until_expiry=days,
    )


class TestFormatExpiryBody:
    def test_plural_days(self):
        assert format_expiry_body(_coupon(7)) == (
            'Your Starbucks coupon "Free drink" expires in 7 days!'
        )

    def test_single_day(self):
        assert format_expiry_body(_coupon(1)) == (
            'Your Starbucks coupon "Free drink" expires in 1 day!'
        )


class TestFormatExpiryNotification:
    def test_payload_shape(self):
        payload = format_expiry_notification(_coupon(3), notification_log_id=42)

        assert payload["title"] == NOTIFICATION_TITLE
        assert payload["body"].endswith("expires in 3 days!")
        assert payload["icon"] == "/icon-192x192.png"
        assert payload["badge"] == "/badge-72x72.png"
        assert payload["tag"] == "coupon-expiry-c1"
        assert payload["data"] == {
            "url": "/dashboard",
            "couponId": "c1",
            "notificationLogId": 42,
        }

    def test_without_log_id(self):
        """Log write failed: payload still goes out, just without click tracking."""
        payload = format_expiry_notification(_coupon(), notification_log_id=None)
        assert "notificationLogId" not in payload["data"]
        assert payload["data"]["couponId"] == "c1"

    def test_tag_is_stable_per_coupon(self):
        seven = format_expiry_notification(_coupon(7))
        one = format_expiry_notification(_coupon(1))
        assert seven["tag"] == one["tag"] == coupon_tag("c1")
