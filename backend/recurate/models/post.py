from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from recurate.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A text/image/video post owned by exactly one user.

    At most one of image_path / video_path is filled, chosen from the MIME
    type of the uploaded file.
    """
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False, default="")
    image_path = Column(String, nullable=True)
    video_path = Column(String, nullable=True)
    # Immutable after creation; the services never assign it on update
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Set in Python so rows created in the same second still order correctly
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=_utcnow)

    owner = relationship("User", backref="posts")
