from timekeeper.models.attendance import AttendanceRecord
from timekeeper.models.employee import Employee
from timekeeper.models.leave import LeaveRequest
from timekeeper.models.user import User

__all__ = ["AttendanceRecord", "Employee", "LeaveRequest", "User"]
