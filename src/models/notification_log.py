from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from src.db.database import Base


class NotificationType(enum.Enum):
    seven_day = "7_day"
    three_day = "3_day"
    one_day = "1_day"

    @classmethod
    def for_offset(cls, days: int) -> "NotificationType":
        return _OFFSET_TYPES[days]

    @property
    def days(self) -> int:
        return int(self.value.split("_")[0])


_OFFSET_TYPES = {
    7: NotificationType.seven_day,
    3: NotificationType.three_day,
    1: NotificationType.one_day,
}


class NotificationStatus(enum.Enum):
    sent = "sent"
    failed = "failed"
    clicked = "clicked"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class NotificationLog(Base):
    __tablename__ = "notification_logs"
    __table_args__ = (
        Index(
            "ix_notification_logs_dedup",
            "coupon_id",
            "notification_type",
            "sent_at",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    coupon_id: Mapped[str] = mapped_column(String(36), nullable=False)
    notification_type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, values_callable=_enum_values), nullable=False
    )
    status: Mapped[NotificationStatus] = mapped_column(
        Enum(NotificationStatus, values_callable=_enum_values), nullable=False
    )
    sent_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<NotificationLog {self.notification_type.value} "
            f"coupon={self.coupon_id} {self.status.value}>"
        )
