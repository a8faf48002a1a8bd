from datetime import datetime
from typing import Optional
from enum import Enum
from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from scheduling_assistant.database import Base, UTCDateTime, utcnow


class AppointmentStatus(str, Enum):
    """Appointment status enum."""
    SCHEDULED = "scheduled"


class Appointment(Base):
    """Appointment model - a confirmed booking consuming exactly one slot."""

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider_id: Mapped[int] = mapped_column(
        ForeignKey("providers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    client_name: Mapped[str] = mapped_column(String(200), nullable=False)
    client_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=AppointmentStatus.SCHEDULED.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
    )

    # Relationships
    provider: Mapped["Provider"] = relationship("Provider", back_populates="appointments")
    slot: Mapped[Optional["Slot"]] = relationship("Slot", back_populates="appointment", uselist=False)

    def __repr__(self) -> str:
        return f"<Appointment {self.id} {self.start_time.isoformat()}>"
