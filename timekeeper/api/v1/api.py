"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from timekeeper.api.v1.endpoints import (attendance, auth, employees, leaves,
                                         system)

api_router = APIRouter()

# Auth (login, register, refresh, own profile)
api_router.include_router(auth.router)

# Employee directory (admin / HR)
api_router.include_router(employees.router)

# Check-in / check-out, history, stats
api_router.include_router(attendance.router)

# Leave requests
api_router.include_router(leaves.router)

# Health
api_router.include_router(system.router)
