"""
User model with gamification progress and prompt preferences.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lvl.core.database import Base


class User(Base):
    """User model. Credential columns must never reach prompt context."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Credentials (owned by the auth service)
    password_hash = Column(Text, nullable=True)
    email_verification_token = Column(Text, nullable=True)
    password_reset_token = Column(Text, nullable=True)

    # Gamification
    level = Column(Integer, default=1, nullable=False)
    xp = Column(Integer, default=0, nullable=False)
    total_tasks_completed = Column(Integer, default=0, nullable=False)

    # Preferences
    timezone = Column(String(64), default="UTC", nullable=False)
    daily_goal_xp = Column(Integer, default=100, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
