# api/user/user_model.py
from sqlalchemy import Column, Integer, String, Float, Enum, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from config.database import Base
import enum
from api.user.user_points_model import UserPointsLog
from api.notifications.notifications_model import Notification
from api.action_records.action_records_model import ActionRecord


class UserRole(enum.Enum):
    user  = 'user'
    admin = 'admin'


class User(Base):
    __tablename__ = 'users'

    # opaque id issued by the identity provider
    id           = Column(String(128), primary_key=True, index=True)
    display_name = Column(String(100), nullable=True)
    email        = Column(String(255), nullable=True, index=True)
    photo_url    = Column(String(1024), nullable=True)
    role         = Column(Enum(UserRole), nullable=False, default=UserRole.user)

    # cumulative stats, only ever changed by single-statement increments
    eco_points            = Column(Integer, nullable=False, default=0, server_default="0", index=True)
    waste_recycled        = Column(Float, nullable=False, default=0.0, server_default="0")
    meals_rescued         = Column(Float, nullable=False, default=0.0, server_default="0")
    waste_recycling_count = Column(Integer, nullable=False, default=0, server_default="0")
    food_donation_count   = Column(Integer, nullable=False, default=0, server_default="0")
    last_recycling_at     = Column(DateTime(timezone=True), nullable=True)
    last_donation_at      = Column(DateTime(timezone=True), nullable=True)
    last_activity_at      = Column(DateTime(timezone=True), nullable=True)

    created_at  = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at  = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    action_records = relationship(
        ActionRecord,
        back_populates="user",
        order_by=ActionRecord.created_at.desc(),
    )
    points_log = relationship(
        UserPointsLog,
        back_populates="user",
        cascade="all, delete-orphan"
    )
    notifications = relationship(Notification, back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id!r}, display_name={self.display_name!r}, eco_points={self.eco_points})>"
