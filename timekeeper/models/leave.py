"""
LeaveRequest model — pending until a manager, HR or admin decides it.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from timekeeper.db.base import Base


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("employees.id"), nullable=False, index=True
    )
    leave_type: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    # annual | sick | personal | emergency
    start_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    end_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    days_requested: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    reason: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="pending", server_default="pending"
    )  # pending | approved | rejected
    approved_by: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    approved_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    rejection_reason: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    employee = relationship("Employee", back_populates="leave_requests")
