from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Integer, Float, Text, Date, DateTime, JSON, ForeignKey, Index
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from config.database import Base
import enum
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActionKind(str, enum.Enum):
    waste = "waste"
    food  = "food"


class ActionStatus(str, enum.Enum):
    pending   = "pending"
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"


# allowed next states; completed and cancelled are terminal
STATUS_TRANSITIONS = {
    ActionStatus.pending:   {ActionStatus.scheduled, ActionStatus.cancelled},
    ActionStatus.scheduled: {ActionStatus.completed, ActionStatus.cancelled},
    ActionStatus.completed: set(),
    ActionStatus.cancelled: set(),
}


class ActionRecord(Base):
    """A waste pickup or food donation request."""
    __tablename__ = "action_records"
    __table_args__ = (
        Index("ix_action_records_user_created", "user_id", "created_at"),
    )

    id      = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    kind    = Column(String(10), nullable=False)

    # waste only
    waste_type = Column(String(20), nullable=True)
    weight     = Column(Float, nullable=True)       # kg

    # food only
    food_type   = Column(String(50), nullable=True)
    quantity    = Column(Float, nullable=True)      # kg or units
    expiry_date = Column(Date, nullable=True)

    description = Column(Text, nullable=False)
    image_urls  = Column(JSON, nullable=False, default=list)
    address     = Column(JSON, nullable=True)

    status                = Column(String(20), nullable=False, default=ActionStatus.pending.value, index=True)
    preferred_pickup_date = Column(Date, nullable=True)
    scheduled_pickup_date = Column(DateTime(timezone=True), nullable=True)
    completed_date        = Column(DateTime(timezone=True), nullable=True)

    # snapshot taken at creation, never recomputed
    points_awarded = Column(Integer, nullable=False, default=0)

    # python-side timestamps keep microseconds so newest-first ordering is stable
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="action_records")

    def __repr__(self):
        return f"<ActionRecord(id={self.id}, kind={self.kind!r}, status={self.status!r}, points={self.points_awarded})>"
