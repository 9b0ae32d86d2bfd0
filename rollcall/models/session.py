# rollcall/models/session.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)

from rollcall.db.base import Base
from rollcall.models.timestamps import utcnow


class SessionRecord(Base):
    """
    One concrete dated session.

    `start_time`/`end_time` are stored as the HH:MM strings they were entered
    as; older rows may hold values the status classifier has to tolerate.
    """

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)

    class_batch_id = Column(
        Integer,
        ForeignKey("class_batches.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    name = Column(String(200), nullable=False, default="")
    frequency = Column(String(16), nullable=True)

    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    start_time = Column(String(8), nullable=True)
    end_time = Column(String(8), nullable=True)

    session_type = Column(String(16), nullable=False, default="PHYSICAL")
    location = Column(JSON, nullable=True)
    radius_meters = Column(Integer, nullable=True)
    virtual_link = Column(String(500), nullable=True)
    assigned_users = Column(JSON, nullable=False, default=list)
    weekly_days = Column(JSON, nullable=False, default=list)

    is_cancelled = Column(Boolean, nullable=False, default=False)
    cancellation_reason = Column(Text, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False, index=True)

    created_by = Column(String(64), nullable=True)
    organization_prefix = Column(String(64), nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return (
            f"<SessionRecord id={self.id} batch={self.class_batch_id} "
            f"date={self.start_date} {self.start_time}-{self.end_time}>"
        )
