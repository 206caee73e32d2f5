"""
Job postings: public listing, admin management, and student applications.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from portal.core.database import get_db
from portal.core.exceptions import ForbiddenError, ResourceNotFoundError, ValidationError
from portal.core.logging_config import logger
from portal.models.job import Job, JobCourse, JobSkillRequirement, JobApplication
from portal.models.skill import StudentSkill
from portal.modules.auth import Privilege, get_privilege, get_session, require_admin, require_session
from portal.schemas.job import (
    JobCreate,
    JobUpdate,
    JobListResponse,
    JobEnvelope,
    JobApplyResponse,
    JobApplicationStatusResponse,
    SkillRequirementIn,
)
from portal.schemas.auth import SuccessResponse
from portal.schemas.session import Session
from portal.services.audit_log import AuditedRoute
from portal.services.catalog import fetch_courses, fetch_skills
from portal.utils.whitelist import apply_update, pick_fields

router = APIRouter(route_class=AuditedRoute)

ALLOWED_JOB_FIELDS = [
    "title", "company", "location", "type", "salary", "open_positions",
    "description", "requirements", "contact_email", "contact_phone",
    "apply_url", "is_active",
]


async def get_job_or_404(db: AsyncSession, job_id: str) -> Job:
    result = await db.execute(select(Job).where(Job.id == job_id))
    job = result.scalar_one_or_none()
    if not job:
        raise ResourceNotFoundError("Job", job_id)
    return job


async def set_job_relations(
    db: AsyncSession,
    job: Job,
    course_ids: Optional[List[str]],
    skill_requirements: Optional[List[SkillRequirementIn]],
) -> None:
    """Replace course and skill relations; ``None`` leaves a relation untouched"""
    if course_ids is not None:
        existing = {link.course_id: link for link in job.job_courses}
        job.job_courses = [
            existing.get(course.id) or JobCourse(course=course)
            for course in await fetch_courses(db, course_ids)
        ]

    if skill_requirements is not None:
        skills = await fetch_skills(db, [sr.skill_id for sr in skill_requirements])
        existing = {req.skill_id: req for req in job.skill_requirements}
        requirements = []
        for sr in skill_requirements:
            if sr.skill_id not in skills or any(r.skill_id == sr.skill_id for r in requirements):
                continue
            requirement = existing.get(sr.skill_id) or JobSkillRequirement(skill=skills[sr.skill_id])
            requirement.required_level = sr.required_level or 1
            requirements.append(requirement)
        job.skill_requirements = requirements


@router.get("", response_model=JobListResponse)
async def list_jobs(
    all_: bool = Query(False, alias="all"),
    db: AsyncSession = Depends(get_db),
    privilege: Privilege = Depends(get_privilege),
):
    """Active jobs, newest first. ``all=true`` includes inactive jobs and is admin only."""
    if all_ and not privilege.can_administer:
        raise ForbiddenError()

    query = select(Job).order_by(Job.created_at.desc())
    if not all_:
        query = query.where(Job.is_active.is_(True))

    result = await db.execute(query)
    return {"jobs": result.scalars().all()}


@router.post("", response_model=JobEnvelope, status_code=201)
async def create_job(
    payload: JobCreate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    if not payload.title or not payload.company:
        raise ValidationError("Title and company are required")

    data = pick_fields(ALLOWED_JOB_FIELDS, payload.model_dump(exclude_unset=True))
    data["is_active"] = True

    job = Job(**data)
    job.job_courses = []
    job.skill_requirements = []
    await set_job_relations(db, job, payload.course_ids or [], payload.skill_requirements or [])

    db.add(job)
    await db.commit()

    logger.info(f"[Jobs] Created job {job.id}", extra={"event_type": "job_created", "job_id": job.id})
    return {"job": job}


@router.get("/{job_id}", response_model=JobEnvelope)
async def get_job(job_id: str, db: AsyncSession = Depends(get_db)):
    return {"job": await get_job_or_404(db, job_id)}


@router.put("/{job_id}", response_model=JobEnvelope)
async def update_job(
    job_id: str,
    payload: JobUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    job = await get_job_or_404(db, job_id)

    data = payload.model_dump(exclude_unset=True)
    for required in ("title", "company"):
        if required in data and not data[required]:
            raise ValidationError(f"{required.capitalize()} cannot be empty", field=required)

    apply_update(job, ALLOWED_JOB_FIELDS, data)
    await set_job_relations(db, job, payload.course_ids, payload.skill_requirements)
    await db.commit()
    return {"job": job}


@router.delete("/{job_id}", response_model=SuccessResponse)
async def delete_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    """Soft delete: the job is deactivated, applications are kept"""
    job = await get_job_or_404(db, job_id)
    apply_update(job, ["is_active"], {"is_active": False})
    await db.commit()
    return SuccessResponse()


@router.post("/{job_id}/duplicate", response_model=JobEnvelope, status_code=201)
async def duplicate_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    """Inactive copy of a job, including its courses and skill requirements"""
    source = await get_job_or_404(db, job_id)

    data = {field: getattr(source, field) for field in ALLOWED_JOB_FIELDS}
    data["title"] = f"{source.title} (copy)"
    data["is_active"] = False

    copy = Job(**data)
    copy.job_courses = [JobCourse(course=link.course) for link in source.job_courses]
    copy.skill_requirements = [
        JobSkillRequirement(skill=req.skill, required_level=req.required_level)
        for req in source.skill_requirements
    ]
    db.add(copy)
    await db.commit()
    return {"job": copy}


@router.post("/{job_id}/apply", response_model=JobApplyResponse)
async def apply_to_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_session),
):
    """Apply as the current student; every skill requirement must be met"""
    job = await get_job_or_404(db, job_id)
    if not job.is_active:
        raise ValidationError("This job is no longer active")

    result = await db.execute(
        select(JobApplication.id).where(
            JobApplication.student_id == session.student_id,
            JobApplication.job_id == job.id,
        )
    )
    if result.scalar_one_or_none() is not None:
        raise ValidationError("You have already applied to this job")

    if job.skill_requirements:
        result = await db.execute(
            select(StudentSkill.skill_id, StudentSkill.proficiency_level)
            .where(StudentSkill.student_id == session.student_id)
        )
        levels = dict(result.all())
        unmet = [
            req for req in job.skill_requirements
            if levels.get(req.skill_id, 0) < req.required_level
        ]
        if unmet:
            raise ValidationError("You do not meet all the required skill levels")

    application = JobApplication(student_id=session.student_id, job_id=job.id)
    db.add(application)
    await db.commit()
    return {"success": True, "application": application}


@router.get("/{job_id}/apply", response_model=JobApplicationStatusResponse)
async def job_application_status(
    job_id: str,
    db: AsyncSession = Depends(get_db),
    session: Optional[Session] = Depends(get_session),
):
    if session is None:
        return JobApplicationStatusResponse(applied=False)

    result = await db.execute(
        select(JobApplication).where(
            JobApplication.student_id == session.student_id,
            JobApplication.job_id == job_id,
        )
    )
    application = result.scalar_one_or_none()

    result = await db.execute(select(StudentSkill).where(StudentSkill.student_id == session.student_id))
    return {
        "applied": application is not None,
        "application": application,
        "studentSkills": result.scalars().all(),
    }
