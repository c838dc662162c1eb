from sqlalchemy import Column, String, Text, DateTime, Date, UniqueConstraint
from sqlalchemy.sql import func

from sebenza.database import Base


class Timesheet(Base):
    """Weekly timesheet header.

    Entries and hour totals are not stored; they are recomputed from
    ``time_entries`` every time the timesheet is read or updated.
    """

    __tablename__ = "timesheets"

    id = Column(String(64), primary_key=True)
    employee_id = Column(String(64), nullable=False, index=True)
    week_start_date = Column(Date, nullable=False)
    week_end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, server_default="draft", default="draft")

    submitted_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(64), nullable=True)
    comments = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("employee_id", "week_start_date", "week_end_date", name="uq_timesheets_employee_week"),
    )
