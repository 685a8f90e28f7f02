"""Top-level API router."""

from fastapi import APIRouter

from timesheet.api.routes.auth import router as auth_router
from timesheet.api.routes.entries import router as entries_router
from timesheet.api.routes.exports import router as exports_router
from timesheet.api.routes.health import router as health_router
from timesheet.api.routes.master_data import router as master_data_router
from timesheet.api.routes.reports import router as reports_router
from timesheet.api.routes.users import router as users_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router)
api_router.include_router(entries_router)
api_router.include_router(master_data_router)
api_router.include_router(users_router)
api_router.include_router(reports_router)
api_router.include_router(exports_router)
