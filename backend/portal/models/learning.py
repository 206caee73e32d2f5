"""
Learning Models - technologies within a course and their ordered topics
"""

from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from portal.core.database import Base
from portal.core.types import GUID, generate_uuid


class Technology(Base):
    __tablename__ = "technologies"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    course_id = Column(GUID, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String(100), nullable=True)
    order_index = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", lazy="selectin")
    topics = relationship(
        "Topic",
        back_populates="technology",
        order_by="Topic.order_index",
        lazy="selectin",
    )

    @property
    def active_topics(self):
        return sorted((t for t in self.topics if t.is_active), key=lambda t: t.order_index)

    def __repr__(self):
        return f"<Technology {self.name}>"


class Topic(Base):
    __tablename__ = "topics"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    technology_id = Column(GUID, ForeignKey("technologies.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)  # Rich text (HTML)
    order_index = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    technology = relationship("Technology", back_populates="topics", lazy="selectin")

    def __repr__(self):
        return f"<Topic {self.title}>"
