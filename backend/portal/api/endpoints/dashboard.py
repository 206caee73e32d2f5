"""
Student dashboard: everything the signed-in student can see, in one call.
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import get_db
from portal.core.exceptions import StudentNotFoundError
from portal.models.certificate_request import CertificateRequest
from portal.models.job import Job
from portal.models.skill import StudentSkill
from portal.models.student import Student
from portal.models.task import Task, TaskApplication
from portal.modules.auth import require_session
from portal.schemas.dashboard import DashboardResponse
from portal.schemas.session import Session
from portal.services.catalog import student_course_ids, visible_to_student

router = APIRouter()


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db),
):
    """
    Jobs and tasks are filtered by course enrollment: an item linked to no
    course is shown to everyone, otherwise the student must share a course.
    Tasks past their deadline are hidden.
    """
    result = await db.execute(select(Student).where(Student.id == session.student_id))
    student = result.scalar_one_or_none()
    if not student:
        raise StudentNotFoundError(session.student_id)

    enrolled = await student_course_ids(db, student.id)
    now = datetime.utcnow()

    result = await db.execute(
        select(Job).where(Job.is_active.is_(True)).order_by(Job.created_at.desc())
    )
    jobs = [job for job in result.scalars().all() if visible_to_student(job.job_courses, enrolled)]

    result = await db.execute(
        select(Task)
        .where(Task.is_active.is_(True))
        .order_by(Task.deadline.is_(None), Task.deadline.asc())
    )
    tasks = [
        task for task in result.scalars().all()
        if visible_to_student(task.task_courses, enrolled) and not task.is_past_deadline(now)
    ]

    result = await db.execute(
        select(StudentSkill)
        .where(StudentSkill.student_id == student.id)
        .order_by(StudentSkill.proficiency_level.desc())
    )
    skills = result.scalars().all()

    result = await db.execute(
        select(TaskApplication)
        .where(TaskApplication.student_id == student.id)
        .order_by(TaskApplication.created_at.desc())
    )
    applications = result.scalars().all()

    result = await db.execute(
        select(CertificateRequest)
        .where(CertificateRequest.student_id == student.id)
        .order_by(CertificateRequest.created_at.desc())
        .limit(1)
    )
    certificate_request = result.scalar_one_or_none()

    return {
        "student": student,
        "jobs": jobs,
        "tasks": tasks,
        "skills": skills,
        "applications": applications,
        "certificate_request": certificate_request,
    }
