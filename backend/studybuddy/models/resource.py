# studybuddy/models/resource.py
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, UniqueConstraint, Uuid
from studybuddy.services.db import Base, utcnow
import uuid


class Resource(Base):
    __tablename__ = "resources"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)

    # file itself lives in object storage; only its public URL is kept here
    file_url = Column(String, nullable=False)
    file_type = Column(String(64), nullable=True)
    file_size = Column(String(32), nullable=True)

    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id"), nullable=False, index=True)
    resource_type = Column(String(32), nullable=False, default="notes")  # notes | question_paper | assignment | ...
    uploaded_by = Column(String(128), nullable=True)

    views = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow)


class ResourceLike(Base):
    __tablename__ = "resource_likes"
    __table_args__ = (UniqueConstraint("resource_id", "user_id", name="uq_resource_like"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    resource_id = Column(Uuid(as_uuid=True), ForeignKey("resources.id"), nullable=False, index=True)
    user_id = Column(String(128), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
