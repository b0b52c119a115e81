# studybuddy/models/discussion.py
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Uuid
from studybuddy.services.db import Base, utcnow
import uuid


class Discussion(Base):
    __tablename__ = "discussions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(256), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(String(128), nullable=False)
    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id"), nullable=True)
    likes = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow)


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    discussion_id = Column(Uuid(as_uuid=True), ForeignKey("discussions.id"), nullable=False, index=True)
    # no FK: a dangling parent is tolerated and rendered at root level
    parent_id = Column(Uuid(as_uuid=True), nullable=True)
    content = Column(Text, nullable=False)
    author_id = Column(String(128), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
