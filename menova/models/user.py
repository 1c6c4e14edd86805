import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from menova.db.session import Base
from menova.utils.encryption import EncryptedText


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    profile: Mapped["UserProfile"] = relationship(
        "UserProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    symptom_samples: Mapped[List["SymptomSample"]] = relationship(
        "SymptomSample",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="SymptomSample.recorded_at.asc()",
    )

    goals: Mapped[List["DailyGoal"]] = relationship(
        "DailyGoal",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class UserProfile(Base):
    """Per-user menopause context used when suggesting goals."""

    __tablename__ = "user_profile"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # "perimenopause" | "menopause" | "postmenopause" | free text
    menopause_stage: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(EncryptedText, nullable=True)
    consent_given: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("0"))
    consent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        server_onupdate=text("CURRENT_TIMESTAMP"),
    )

    user: Mapped["User"] = relationship("User", back_populates="profile")
