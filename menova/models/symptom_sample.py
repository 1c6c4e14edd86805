"""Recorded symptom intensities. Rows are insert-only; a correction is a new sample."""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Enum as SAEnum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from menova.db.session import Base
from menova.utils.encryption import EncryptedText


class SampleSource(str, Enum):
    MANUAL = "manual"
    DAILY_CHECKIN = "daily_checkin"
    CHAT = "chat"
    VOICE = "voice"
    NOTES = "notes"


class SymptomSample(Base):
    __tablename__ = "symptom_samples"
    __table_args__ = (
        CheckConstraint("intensity >= 1 AND intensity <= 5", name="ck_symptom_samples_intensity"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    symptom_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    intensity: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[SampleSource] = mapped_column(
        SAEnum(SampleSource, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SampleSource.MANUAL,
    )
    notes: Mapped[Optional[str]] = mapped_column(EncryptedText, nullable=True)
    # Hash of user|source|text, used to collapse duplicate submissions
    dedupe_key: Mapped[Optional[str]] = mapped_column(String(16), nullable=True, index=True)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User", back_populates="symptom_samples")
