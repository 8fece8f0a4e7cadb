from sqlalchemy import (
    Column,
    Integer,
    Text,
    String,
    Boolean,
    Enum,
    ForeignKey,
    DateTime,
    func,
)
from sqlalchemy.orm import relationship
from config.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    type = Column(
        Enum("waste", "food", "system", name="notification_type"),
        nullable=False,
        server_default="system",
    )
    # id of the related action record, if any
    related_id = Column(String(36), nullable=True)
    read = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="notifications")
