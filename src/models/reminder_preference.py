from __future__ import annotations

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from src.db.database import Base
from src.models.base import TimestampMixin


class ReminderPreference(Base, TimestampMixin):
    __tablename__ = "reminder_preferences"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    remind_7_days: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    remind_3_days: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    remind_1_day: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<ReminderPreference user={self.user_id} "
            f"7d={self.remind_7_days} 3d={self.remind_3_days} 1d={self.remind_1_day}>"
        )
