from fastapi import APIRouter
from portal.api.endpoints import (
    auth,
    jobs,
    tasks,
    skills,
    courses,
    technologies,
    topics,
    certificate_requests,
    logs,
    login_attempts,
    dashboard,
)
from portal.api.endpoints.admin import admin_router

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(admin_router)
api_router.include_router(jobs.router, prefix="/jobs", tags=["Jobs"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(skills.router, prefix="/skills", tags=["Skills"])
api_router.include_router(courses.router, prefix="/courses", tags=["Courses"])
api_router.include_router(technologies.router, prefix="/technologies", tags=["Learning"])
api_router.include_router(topics.router, prefix="/topics", tags=["Learning"])
api_router.include_router(certificate_requests.router, prefix="/certificate-requests", tags=["Certificates"])
api_router.include_router(logs.router, prefix="/logs", tags=["Admin Logs"])
api_router.include_router(login_attempts.router, prefix="/login-attempts", tags=["Admin Logs"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
