from __future__ import annotations

import json
from typing import Any, Dict

import requests
from loguru import logger
from pywebpush import WebPushException, webpush

from src.config import get_settings
from src.notifications.base import DeliveryResult, SubscriptionInfo

SEND_TIMEOUT = 10  # seconds

# Push services answer 404/410 once a subscription has expired or been revoked
GONE_STATUS_CODES = (404, 410)


class WebPushSender:
    """Send notifications via the Web Push protocol (VAPID)."""

    def __init__(self):
        settings = get_settings()
        self.vapid_private_key = settings.vapid_private_key
        self.vapid_subject = settings.vapid_subject
        self.ttl = settings.push_ttl_seconds

    @classmethod
    def is_configured(cls) -> bool:
        """Check if VAPID keys are set."""
        settings = get_settings()
        return bool(settings.vapid_public_key and settings.vapid_private_key)

    def send(self, subscription: SubscriptionInfo, payload: Dict[str, Any]) -> DeliveryResult:
        """Deliver one payload to one subscription endpoint.

        Returns:
            DeliveryResult.success, or permanent_failure when the push service
            reports the endpoint gone, or transient_failure for anything else.
        """
        endpoint_short = subscription.endpoint[:60]
        try:
            webpush(
                subscription_info=subscription.to_webpush(),
                data=json.dumps(payload),
                vapid_private_key=self.vapid_private_key,
                # pywebpush fills in "aud"/"exp", so hand it a fresh dict each call
                vapid_claims={"sub": self.vapid_subject},
                ttl=self.ttl,
                timeout=SEND_TIMEOUT,
            )
        except WebPushException as e:
            status_code = e.response.status_code if e.response is not None else None
            if status_code in GONE_STATUS_CODES:
                logger.warning(f"Push subscription gone ({status_code}): {endpoint_short}")
                return DeliveryResult.permanent_failure
            logger.error(f"Web push error for {endpoint_short}: {status_code} - {e.message}")
            return DeliveryResult.transient_failure
        except requests.RequestException as e:
            logger.error(f"Web push request failed for {endpoint_short}: {e}")
            return DeliveryResult.transient_failure

        logger.debug(f"Web push delivered to {endpoint_short}")
        return DeliveryResult.success
