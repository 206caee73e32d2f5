"""
Tasks: admin management and the student work lifecycle
(in_progress -> paused/done -> approved/rejected by an admin).
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import List, Optional

from portal.core.database import get_db
from portal.core.exceptions import ForbiddenError, ResourceNotFoundError, ValidationError
from portal.core.logging_config import logger
from portal.models.task import (
    Task,
    TaskCourse,
    TaskSkillReward,
    TaskApplication,
    TaskApplicationStatus,
    STUDENT_STATUSES,
)
from portal.modules.auth import Privilege, get_privilege, get_session, require_admin, require_session
from portal.schemas.auth import SuccessResponse
from portal.schemas.session import Session
from portal.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskListResponse,
    TaskEnvelope,
    TaskApplicationUpdate,
    TaskApplicationEnvelope,
    TaskApplicationStatusResponse,
    SkillRewardIn,
)
from portal.services.audit_log import AuditedRoute
from portal.services.catalog import fetch_courses, fetch_skills
from portal.utils.whitelist import apply_update, pick_fields

router = APIRouter(route_class=AuditedRoute)

ALLOWED_TASK_FIELDS = ["title", "description", "deadline", "is_active"]


async def get_task_or_404(db: AsyncSession, task_id: str) -> Task:
    result = await db.execute(select(Task).where(Task.id == task_id))
    task = result.scalar_one_or_none()
    if not task:
        raise ResourceNotFoundError("Task", task_id)
    return task


async def get_own_application(db: AsyncSession, student_id: str, task_id: str) -> Optional[TaskApplication]:
    result = await db.execute(
        select(TaskApplication).where(
            TaskApplication.student_id == student_id,
            TaskApplication.task_id == task_id,
        )
    )
    return result.scalar_one_or_none()


async def set_task_relations(
    db: AsyncSession,
    task: Task,
    course_ids: Optional[List[str]],
    skill_rewards: Optional[List[SkillRewardIn]],
) -> None:
    """Replace course and reward relations; ``None`` leaves a relation untouched"""
    if course_ids is not None:
        existing = {link.course_id: link for link in task.task_courses}
        task.task_courses = [
            existing.get(course.id) or TaskCourse(course=course)
            for course in await fetch_courses(db, course_ids)
        ]

    if skill_rewards is not None:
        skills = await fetch_skills(db, [sr.skill_id for sr in skill_rewards])
        existing = {reward.skill_id: reward for reward in task.skill_rewards}
        rewards = []
        for sr in skill_rewards:
            if sr.skill_id not in skills or any(r.skill_id == sr.skill_id for r in rewards):
                continue
            reward = existing.get(sr.skill_id) or TaskSkillReward(skill=skills[sr.skill_id])
            reward.level_reward = sr.level_reward or 1
            rewards.append(reward)
        task.skill_rewards = rewards


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    all_: bool = Query(False, alias="all"),
    db: AsyncSession = Depends(get_db),
    privilege: Privilege = Depends(get_privilege),
):
    """Tasks by deadline, soonest first, open-ended tasks last"""
    if all_ and not privilege.can_administer:
        raise ForbiddenError()

    query = select(Task).order_by(Task.deadline.is_(None), Task.deadline.asc(), Task.created_at.desc())
    if not all_:
        query = query.where(Task.is_active.is_(True))

    result = await db.execute(query)
    return {"tasks": result.scalars().all()}


@router.post("", response_model=TaskEnvelope, status_code=201)
async def create_task(
    payload: TaskCreate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    if not payload.title:
        raise ValidationError("Title is required", field="title")

    data = pick_fields(ALLOWED_TASK_FIELDS, payload.model_dump(exclude_unset=True))
    data["is_active"] = True

    task = Task(**data)
    task.task_courses = []
    task.skill_rewards = []
    await set_task_relations(db, task, payload.course_ids or [], payload.skill_rewards or [])

    db.add(task)
    await db.commit()

    logger.info(f"[Tasks] Created task {task.id}", extra={"event_type": "task_created", "task_id": task.id})
    return {"task": task}


@router.get("/{task_id}", response_model=TaskEnvelope)
async def get_task(task_id: str, db: AsyncSession = Depends(get_db)):
    return {"task": await get_task_or_404(db, task_id)}


@router.put("/{task_id}", response_model=TaskEnvelope)
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    task = await get_task_or_404(db, task_id)

    data = payload.model_dump(exclude_unset=True)
    if "title" in data and not data["title"]:
        raise ValidationError("Title cannot be empty", field="title")

    apply_update(task, ALLOWED_TASK_FIELDS, data)
    await set_task_relations(db, task, payload.course_ids, payload.skill_rewards)
    await db.commit()
    return {"task": task}


@router.delete("/{task_id}", response_model=SuccessResponse)
async def delete_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    """Hard delete, together with its relations and applications"""
    task = await get_task_or_404(db, task_id)
    await db.execute(delete(TaskApplication).where(TaskApplication.task_id == task.id))
    await db.delete(task)
    await db.commit()
    return SuccessResponse()


@router.post("/{task_id}/duplicate", response_model=TaskEnvelope, status_code=201)
async def duplicate_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    """Inactive copy without a deadline, keeping courses and skill rewards"""
    source = await get_task_or_404(db, task_id)

    copy = Task(
        title=f"{source.title} (copy)",
        description=source.description,
        deadline=None,
        is_active=False,
    )
    copy.task_courses = [TaskCourse(course=link.course) for link in source.task_courses]
    copy.skill_rewards = [
        TaskSkillReward(skill=reward.skill, level_reward=reward.level_reward)
        for reward in source.skill_rewards
    ]
    db.add(copy)
    await db.commit()
    return {"task": copy}


@router.post("/{task_id}/apply", response_model=TaskApplicationEnvelope)
async def apply_to_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_session),
):
    task = await get_task_or_404(db, task_id)
    if not task.is_active:
        raise ValidationError("This task is no longer active")
    if task.is_past_deadline():
        raise ValidationError("The deadline for this task has passed")

    if await get_own_application(db, session.student_id, task.id) is not None:
        raise ValidationError("You have already applied to this task")

    application = TaskApplication(
        student_id=session.student_id,
        task_id=task.id,
        status=TaskApplicationStatus.IN_PROGRESS.value,
    )
    db.add(application)
    await db.commit()
    return {"success": True, "application": application}


@router.get("/{task_id}/apply", response_model=TaskApplicationStatusResponse)
async def task_application_status(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    session: Optional[Session] = Depends(get_session),
):
    if session is None:
        return TaskApplicationStatusResponse(applied=False)

    application = await get_own_application(db, session.student_id, task_id)
    return {"applied": application is not None, "application": application}


@router.put("/{task_id}/apply", response_model=TaskApplicationEnvelope)
async def update_task_application(
    task_id: str,
    payload: TaskApplicationUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_session),
):
    """Move the student's own application between in_progress, paused and done"""
    if payload.status not in STUDENT_STATUSES:
        raise ValidationError("Invalid status", field="status")

    submission = (payload.submission or "").strip()
    if payload.status == TaskApplicationStatus.DONE.value and not submission:
        raise ValidationError("Submission is required when marking task as done", field="submission")

    application = await get_own_application(db, session.student_id, task_id)
    if application is None:
        raise ResourceNotFoundError("Application")
    if application.is_reviewed:
        raise ValidationError("Cannot update approved or rejected application")

    application.status = payload.status
    application.updated_at = datetime.utcnow()
    if submission:
        application.submission = submission

    await db.commit()
    return {"success": True, "application": application}


@router.delete("/{task_id}/apply", response_model=SuccessResponse)
async def cancel_task_application(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_session),
):
    application = await get_own_application(db, session.student_id, task_id)
    if application is None:
        raise ResourceNotFoundError("Application")
    if application.status == TaskApplicationStatus.APPROVED.value:
        raise ValidationError("Cannot cancel approved application")

    await db.delete(application)
    await db.commit()
    return SuccessResponse()
