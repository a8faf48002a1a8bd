from datetime import datetime
from typing import Optional
from sqlalchemy import Boolean, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from scheduling_assistant.database import Base, UTCDateTime, utcnow


class Slot(Base):
    """Slot model - one bookable window for a provider.

    A slot is open only while ``is_available`` is true and no appointment is
    linked. The booking transaction flips both in a single UPDATE.
    """

    __tablename__ = "slots"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider_id: Mapped[int] = mapped_column(
        ForeignKey("providers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    appointment_id: Mapped[int | None] = mapped_column(
        ForeignKey("appointments.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
    )

    # Relationships
    provider: Mapped["Provider"] = relationship("Provider", back_populates="slots")
    appointment: Mapped[Optional["Appointment"]] = relationship("Appointment", back_populates="slot")

    __table_args__ = (
        Index("idx_slots_available_start", "is_available", "start_time"),
    )

    @property
    def is_open(self) -> bool:
        return self.is_available and self.appointment_id is None

    def __repr__(self) -> str:
        return f"<Slot {self.id} {self.start_time.isoformat()}>"
