from datetime import datetime
from unittest.mock import MagicMock

import pytest

from factories import NOW, add_subscription
from src.models.notification_log import (
    NotificationLog,
    NotificationStatus,
    NotificationType,
)
from src.models.push_subscription import PushSubscription
from src.notifications.base import (
    DeliveryResult,
    ExpiringCoupon,
    NotificationIntent,
    SubscriptionInfo,
)
from src.notifications.dispatcher import NotificationDispatcher
from src.notifications.stores import NotificationLogStore, SubscriptionStore
from src.notifications.webpush import WebPushSender


def _intent(endpoints):
    coupon = ExpiringCoupon(
        id="c1",
        user_id="u1",
        merchant="Acme",
        title="20% off",
        expires_at=datetime(2026, 3, 17),
        days_until_expiry=7,
    )
    return NotificationIntent(
        user_id="u1",
        coupon=coupon,
        notification_type=NotificationType.seven_day,
        subscriptions=[SubscriptionInfo(endpoint=e, p256dh="p", auth="a") for e in endpoints],
    )


def _sender(results):
    sender = MagicMock(spec=WebPushSender)
    sender.send.side_effect = lambda sub, payload: results[sub.endpoint]
    return sender


@pytest.fixture
def make_dispatcher(session_factory, executor):
    def _make(sender, log_store=None):
        return NotificationDispatcher(
            SubscriptionStore(session_factory),
            log_store or NotificationLogStore(session_factory),
            sender,
            executor,
            clock=lambda: NOW,
        )

    return _make


class TestNotificationDispatcher:
    def test_single_subscription_success(self, make_dispatcher, db_session):
        add_subscription(db_session, "u1", "e1")
        sender = _sender({"e1": DeliveryResult.success})

        assert make_dispatcher(sender).dispatch(_intent(["e1"])) is True

        log = db_session.query(NotificationLog).one()
        assert log.status == NotificationStatus.sent
        assert log.coupon_id == "c1"
        assert log.user_id == "u1"
        assert log.notification_type == NotificationType.seven_day
        assert log.sent_at == NOW

    def test_payload_carries_log_id(self, make_dispatcher, db_session):
        sender = _sender({"e1": DeliveryResult.success})

        make_dispatcher(sender).dispatch(_intent(["e1"]))

        log = db_session.query(NotificationLog).one()
        payload = sender.send.call_args.args[1]
        assert payload["data"]["notificationLogId"] == log.id
        assert payload["tag"] == "coupon-expiry-c1"

    def test_partial_success_prunes_gone_endpoint(self, make_dispatcher, db_session):
        add_subscription(db_session, "u1", "e1")
        add_subscription(db_session, "u1", "e2")
        sender = _sender(
            {"e1": DeliveryResult.permanent_failure, "e2": DeliveryResult.success}
        )

        assert make_dispatcher(sender).dispatch(_intent(["e1", "e2"])) is True

        remaining = db_session.query(PushSubscription).filter_by(user_id="u1").all()
        assert [s.endpoint for s in remaining] == ["e2"]
        assert db_session.query(NotificationLog).one().status == NotificationStatus.sent

    def test_all_transient_failures_mark_failed_and_keep_subscriptions(
        self, make_dispatcher, db_session
    ):
        add_subscription(db_session, "u1", "e1")
        add_subscription(db_session, "u1", "e2")
        sender = _sender(
            {"e1": DeliveryResult.transient_failure, "e2": DeliveryResult.transient_failure}
        )

        assert make_dispatcher(sender).dispatch(_intent(["e1", "e2"])) is False

        assert db_session.query(PushSubscription).count() == 2
        assert db_session.query(NotificationLog).one().status == NotificationStatus.failed

    def test_every_endpoint_is_attempted(self, make_dispatcher):
        sender = _sender(
            {
                "e1": DeliveryResult.permanent_failure,
                "e2": DeliveryResult.transient_failure,
                "e3": DeliveryResult.success,
            }
        )

        make_dispatcher(sender).dispatch(_intent(["e1", "e2", "e3"]))

        attempted = sorted(call.args[0].endpoint for call in sender.send.call_args_list)
        assert attempted == ["e1", "e2", "e3"]

    def test_sender_exception_is_isolated(self, make_dispatcher, db_session):
        add_subscription(db_session, "u1", "e1")
        add_subscription(db_session, "u1", "e2")

        def send(sub, payload):
            if sub.endpoint == "e1":
                raise RuntimeError("boom")
            return DeliveryResult.success

        sender = MagicMock(spec=WebPushSender)
        sender.send.side_effect = send

        assert make_dispatcher(sender).dispatch(_intent(["e1", "e2"])) is True
        # An unexpected error is not proof the endpoint is gone
        assert db_session.query(PushSubscription).count() == 2

    def test_log_write_failure_still_delivers(self, make_dispatcher):
        log_store = MagicMock(spec=NotificationLogStore)
        log_store.create.side_effect = RuntimeError("database is locked")
        sender = _sender({"e1": DeliveryResult.transient_failure})

        delivered = make_dispatcher(sender, log_store=log_store).dispatch(_intent(["e1"]))

        assert delivered is False
        sender.send.assert_called_once()
        payload = sender.send.call_args.args[1]
        assert "notificationLogId" not in payload["data"]
        log_store.update_status.assert_not_called()

    def test_status_update_failure_is_swallowed(self, make_dispatcher):
        log_store = MagicMock(spec=NotificationLogStore)
        log_store.create.return_value = 7
        log_store.update_status.side_effect = RuntimeError("connection reset")
        sender = _sender({"e1": DeliveryResult.transient_failure})

        assert make_dispatcher(sender, log_store=log_store).dispatch(_intent(["e1"])) is False
        log_store.update_status.assert_called_once_with(7, NotificationStatus.failed)
