from sqlalchemy import Column, String, Text, Boolean, DateTime, Date, Integer, Numeric, JSON, Index
from sqlalchemy.sql import func

from sebenza.database import Base


class TimeEntry(Base):
    __tablename__ = "time_entries"

    id = Column(String(64), primary_key=True)
    employee_id = Column(String(64), nullable=False, index=True)
    project_id = Column(String(64), nullable=False, index=True)
    task_id = Column(String(64), nullable=True)
    description = Column(Text, nullable=False)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)  # NULL while the timer runs
    duration = Column(Integer, nullable=True)  # minutes
    date = Column(Date, nullable=False)

    is_active = Column(Boolean, nullable=False, default=False)
    billable = Column(Boolean, nullable=False, default=True)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    tags = Column(JSON, nullable=True, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_time_entries_employee_date", "employee_id", "date"),
    )
