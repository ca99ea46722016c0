# catalog/models.py
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(150), unique=True, nullable=False)
    password = Column(String(255), nullable=False) # pbkdf2_sha256$iterations$salt$hash

    events = relationship("AnalyticsEvent", back_populates="user")

class Content(Base):
    __tablename__ = "content"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    type = Column(String(20), nullable=False) # "movie" or "tv_show"
    genres = Column(JSON, nullable=False)
    duration = Column(String(50), nullable=True)
    rating = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="draft", index=True) # "draft" or "published"
    views = Column(Integer, default=0)
    description = Column(Text, nullable=True)
    thumbnail_url = Column(String(500), nullable=True)
    video_url = Column(String(500), nullable=True)
    trailer_url = Column(String(500), nullable=True)
    release_year = Column(Integer, nullable=True)
    director = Column(String(255), nullable=True)
    writer = Column(String(255), nullable=True)
    cast = Column(JSON, nullable=True)
    tags = Column(JSON, nullable=True)
    episodes = Column(Integer, nullable=True) # Only for TV shows
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    events = relationship("AnalyticsEvent", back_populates="content")

class UpcomingContent(Base):
    __tablename__ = "upcoming_content"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False)
    genres = Column(JSON, nullable=False)
    episodes = Column(Integer, nullable=True)
    release_date = Column(DateTime(timezone=True), nullable=False)
    description = Column(Text, nullable=False)
    thumbnail_url = Column(String(500), nullable=True)
    trailer_url = Column(String(500), nullable=True)
    section_order = Column(Integer, default=0, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

class AnalyticsEvent(Base):
    __tablename__ = "analytics"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    content_id = Column(Integer, ForeignKey("content.id"), nullable=True, index=True)
    event_type = Column(String(20), nullable=False, index=True) # "view", "play", "like", "add_to_list"
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    # 'metadata' is reserved on declarative classes
    event_metadata = Column("metadata", JSON, nullable=True)

    content = relationship("Content", back_populates="events")
    user = relationship("User", back_populates="events")
