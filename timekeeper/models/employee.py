"""
Employee model — HR profile linked one-to-one with an account.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from timekeeper.db.base import Base


class Employee(Base):
    __tablename__ = "employees"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id"), unique=True, nullable=False
    )
    employee_code: str = Column(String(32), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    first_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    last_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    phone: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    department: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    position: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    hire_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    salary: Decimal = Column(Numeric(12, 2), nullable=False, default=0)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="active", server_default="active", index=True
    )  # active | inactive | terminated
    address: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    emergency_contact: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    birth_date: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    gender: str | None = Column(String(10), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User", back_populates="employee")
    attendances = relationship("AttendanceRecord", back_populates="employee")
    leave_requests = relationship("LeaveRequest", back_populates="employee")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
