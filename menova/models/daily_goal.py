import uuid
import datetime as dt
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from menova.db.session import Base


class GoalCategory(str, Enum):
    NOURISH = "nourish"
    CENTER = "center"
    PLAY = "play"
    GENERAL = "general"


class DailyGoal(Base):
    __tablename__ = "daily_goals"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    goal: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[GoalCategory] = mapped_column(
        SAEnum(GoalCategory, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=GoalCategory.GENERAL,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # "manual" | "suggested" | "symptom_auto"
    source: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: dt.datetime.now(dt.timezone.utc),
    )

    user = relationship("User", back_populates="goals")
