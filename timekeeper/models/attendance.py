"""
Attendance model — one check-in / check-out pair per employee per day.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Column, DateTime, Float, ForeignKey, Index, Integer,
                        String, UniqueConstraint)
from sqlalchemy.orm import relationship

from timekeeper.db.base import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("employee_id", "work_date", name="uq_attendance_emp_day"),
        Index("ix_attendance_employee_check_in", "employee_id", "check_in_time"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(Integer, ForeignKey("employees.id"), nullable=False)  # type: ignore[assignment]
    work_date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD, local

    check_in_time: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    check_in_location: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    check_in_latitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    check_in_longitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    check_in_method: str = Column(String(20), nullable=False, default="manual")  # type: ignore[assignment]

    check_out_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    check_out_location: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    check_out_latitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    check_out_longitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    check_out_method: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]

    work_hours: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    overtime_hours: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False)  # type: ignore[assignment]  # present | late
    notes: str | None = Column(String(1000), nullable=True)  # type: ignore[assignment]

    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    employee = relationship("Employee", back_populates="attendances")

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None
