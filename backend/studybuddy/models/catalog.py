# studybuddy/models/catalog.py
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Uuid
from studybuddy.services.db import Base, utcnow
import uuid


class Department(Base):
    __tablename__ = "departments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(128), nullable=False, unique=True)
    code = Column(String(16), nullable=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)


class Course(Base):
    __tablename__ = "courses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    department_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id"), nullable=False, index=True)
    name = Column(String(128), nullable=False)
    code = Column(String(32), nullable=False)
    semester = Column(Integer, nullable=False)     # 1..8
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
