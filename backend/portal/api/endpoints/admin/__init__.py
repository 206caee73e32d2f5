"""
Admin API endpoints. Everything except stop-impersonate requires a verified,
non-impersonating admin session.
"""
from fastapi import APIRouter

from portal.api.endpoints.admin import impersonation, students, task_applications

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(impersonation.router, tags=["Admin Impersonation"])
admin_router.include_router(students.router, prefix="/students", tags=["Admin Students"])
admin_router.include_router(task_applications.router, prefix="/task-applications", tags=["Admin Task Applications"])
