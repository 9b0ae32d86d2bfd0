# rollcall/models/class_batch.py
from sqlalchemy import JSON, Column, Date, DateTime, Integer, String, Text

from rollcall.db.base import Base
from rollcall.models.timestamps import utcnow


class ClassBatch(Base):
    """
    Recurrence-defining parent of a group of sessions.

    The recurrence last used to generate sessions is kept on the batch so an
    edit can tell whether the schedule changed.
    """

    __tablename__ = "class_batches"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    default_time = Column(String(5), nullable=True)
    default_location = Column(String(500), nullable=True)

    created_by = Column(String(64), nullable=False, index=True)
    organization_prefix = Column(String(64), nullable=False, index=True)

    frequency = Column(String(16), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    weekly_days = Column(JSON, nullable=False, default=list)
    custom_dates = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<ClassBatch id={self.id} name={self.name!r} frequency={self.frequency}>"
