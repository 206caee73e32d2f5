"""
Admin review of student task submissions.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Optional

from portal.core.database import get_db
from portal.core.exceptions import ValidationError, ResourceNotFoundError
from portal.core.logging_config import logger
from portal.models.skill import StudentSkill
from portal.models.task import TaskApplication, TaskApplicationStatus, REVIEW_STATUSES
from portal.modules.auth import require_admin
from portal.schemas.admin import MessageResponse
from portal.schemas.session import Session
from portal.schemas.task import TaskApplicationListResponse, TaskApplicationReview
from portal.services.audit_log import PrivilegedAuditedRoute

router = APIRouter(route_class=PrivilegedAuditedRoute)


async def award_skill_levels(db: AsyncSession, application: TaskApplication) -> None:
    """Add each reward of the application's task to the student's proficiency"""
    for reward in application.task.skill_rewards:
        result = await db.execute(
            select(StudentSkill).where(
                StudentSkill.student_id == application.student_id,
                StudentSkill.skill_id == reward.skill_id,
            )
        )
        student_skill = result.scalar_one_or_none()
        if student_skill:
            student_skill.proficiency_level += reward.level_reward
            student_skill.updated_at = datetime.utcnow()
        else:
            db.add(StudentSkill(
                student_id=application.student_id,
                skill_id=reward.skill_id,
                proficiency_level=reward.level_reward,
            ))


@router.get("", response_model=TaskApplicationListResponse)
async def list_task_applications(
    status: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    query = select(TaskApplication).order_by(TaskApplication.created_at.desc())
    if status:
        query = query.where(TaskApplication.status == status)

    result = await db.execute(query)
    return TaskApplicationListResponse(applications=result.scalars().all())


@router.put("/{application_id}", response_model=MessageResponse)
async def review_task_application(
    application_id: str,
    payload: TaskApplicationReview,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    """Approve (awarding skill levels) or reject a submission. Each application is reviewed once."""
    if payload.status not in REVIEW_STATUSES:
        raise ValidationError("Invalid status. Use approved or rejected.", field="status")

    result = await db.execute(select(TaskApplication).where(TaskApplication.id == application_id))
    application = result.scalar_one_or_none()
    if not application:
        raise ResourceNotFoundError("Application", application_id)

    if application.is_reviewed:
        raise ValidationError("Application has already been processed", field="status")

    application.status = payload.status
    application.updated_at = datetime.utcnow()

    approved = payload.status == TaskApplicationStatus.APPROVED.value
    if approved and application.task is not None:
        await award_skill_levels(db, application)

    await db.commit()

    logger.info(
        f"[TaskReview] Application {application_id} {payload.status}",
        extra={"event_type": "task_review", "application_id": application_id, "admin_id": admin.student_id},
    )
    return MessageResponse(
        message="Application approved and skills awarded" if approved else "Application rejected"
    )
