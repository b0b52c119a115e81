# studybuddy/models/schedule.py
from sqlalchemy import Column, String, Text, Date, Time, DateTime, Uuid
from studybuddy.services.db import Base, utcnow
import uuid

EVENT_TYPES = ("class", "exam", "assignment", "study")


class ScheduleEvent(Base):
    __tablename__ = "schedule_events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(String(128), nullable=True, index=True)
    title = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False)
    time = Column(Time, nullable=False)
    type = Column(String(16), nullable=False, default="class")  # one of EVENT_TYPES

    created_at = Column(DateTime(timezone=True), default=utcnow)
