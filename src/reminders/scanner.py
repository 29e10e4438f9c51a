from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import List, Sequence

from loguru import logger

from src.errors import NotificationJobError
from src.notifications.base import ExpiringCoupon
from src.notifications.stores import CouponStore


def scan_expiring_coupons(
    coupon_store: CouponStore, offsets: Sequence[int], today: date
) -> List[ExpiringCoupon]:
    """Collect coupons expiring exactly ``offset`` days from ``today`` for every offset.

    Offsets are queried in parallel. A failed offset contributes nothing; if
    every offset fails the store is treated as unreachable.
    """
    if not offsets:
        return []

    with ThreadPoolExecutor(max_workers=len(offsets)) as pool:
        futures = {
            offset: pool.submit(coupon_store.find_expiring_on, offset, today)
            for offset in offsets
        }

    coupons: List[ExpiringCoupon] = []
    errors = []
    for offset, future in futures.items():
        try:
            found = future.result()
        except Exception as e:
            logger.error(f"Error fetching coupons expiring in {offset} days: {e}")
            errors.append(e)
            continue
        logger.info(f"Found {len(found)} coupons expiring in {offset} days")
        coupons.extend(found)

    if len(errors) == len(futures):
        raise NotificationJobError("Coupon store unreachable for every reminder offset") from errors[0]

    return coupons
