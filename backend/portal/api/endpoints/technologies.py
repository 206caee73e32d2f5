"""
Technologies within a course. Public reads, admin management.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from portal.core.database import get_db
from portal.core.exceptions import ResourceNotFoundError, ValidationError
from portal.models.course import Course
from portal.models.learning import Technology, Topic
from portal.modules.auth import Privilege, get_privilege, require_admin
from portal.schemas.auth import SuccessResponse
from portal.schemas.catalog import (
    TechnologyCreate,
    TechnologyListResponse,
    TechnologyEnvelope,
    TechnologyResponse,
    TopicBrief,
)
from portal.schemas.session import Session
from portal.services.audit_log import AuditedRoute
from portal.utils.whitelist import apply_update, pick_fields

router = APIRouter(route_class=AuditedRoute)

ALLOWED_TECHNOLOGY_FIELDS = ["name", "description", "icon", "order_index", "is_active"]


async def get_technology_or_404(db: AsyncSession, technology_id: str) -> Technology:
    result = await db.execute(select(Technology).where(Technology.id == technology_id))
    technology = result.scalar_one_or_none()
    if not technology:
        raise ResourceNotFoundError("Technology", technology_id)
    return technology


async def get_course_or_404(db: AsyncSession, course_id: str) -> Course:
    result = await db.execute(select(Course).where(Course.id == course_id))
    course = result.scalar_one_or_none()
    if not course:
        raise ResourceNotFoundError("Course", course_id)
    return course


def serialize_technology(technology: Technology, include_inactive: bool = False) -> TechnologyResponse:
    """Technology with its active topics, or every topic for the admin view"""
    data = TechnologyResponse.model_validate(technology)
    if include_inactive:
        data.topics = [
            TopicBrief.model_validate(topic)
            for topic in sorted(technology.topics, key=lambda t: t.order_index)
        ]
    return data


@router.get("", response_model=TechnologyListResponse)
async def list_technologies(
    course_id: Optional[str] = Query(None),
    all_: bool = Query(False, alias="all"),
    db: AsyncSession = Depends(get_db),
    privilege: Privilege = Depends(get_privilege),
):
    """Active technologies in order, each with its active topics.

    Admins may pass ``all=true`` to include inactive technologies and topics.
    """
    include_inactive = all_ and privilege.can_administer

    query = select(Technology).order_by(Technology.order_index)
    if not include_inactive:
        query = query.where(Technology.is_active.is_(True))
    if course_id:
        query = query.where(Technology.course_id == course_id)

    result = await db.execute(query)
    return {"technologies": [serialize_technology(t, include_inactive) for t in result.scalars().all()]}


@router.post("", response_model=TechnologyEnvelope, status_code=201)
async def create_technology(
    payload: TechnologyCreate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    data = pick_fields(ALLOWED_TECHNOLOGY_FIELDS, payload.model_dump(exclude_unset=True))
    if not data.get("name"):
        raise ValidationError("Name is required", field="name")
    if data.get("is_active") is None:
        data["is_active"] = True
    if data.get("order_index") is None:
        data["order_index"] = 0

    course = await get_course_or_404(db, payload.course_id) if payload.course_id else None

    technology = Technology(**data, course=course, topics=[])
    db.add(technology)
    await db.commit()
    return {"technology": serialize_technology(technology, include_inactive=True)}


@router.get("/{technology_id}", response_model=TechnologyEnvelope)
async def get_technology(
    technology_id: str,
    all_: bool = Query(False, alias="all"),
    db: AsyncSession = Depends(get_db),
    privilege: Privilege = Depends(get_privilege),
):
    technology = await get_technology_or_404(db, technology_id)
    return {"technology": serialize_technology(technology, all_ and privilege.can_administer)}


@router.put("/{technology_id}", response_model=TechnologyEnvelope)
async def update_technology(
    technology_id: str,
    payload: TechnologyCreate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    technology = await get_technology_or_404(db, technology_id)

    data = payload.model_dump(exclude_unset=True)
    if "name" in data and not data["name"]:
        raise ValidationError("Name cannot be empty", field="name")
    if "course_id" in data:
        technology.course = await get_course_or_404(db, data["course_id"]) if data["course_id"] else None

    apply_update(technology, ALLOWED_TECHNOLOGY_FIELDS, data)
    await db.commit()
    return {"technology": serialize_technology(technology, include_inactive=True)}


@router.delete("/{technology_id}", response_model=SuccessResponse)
async def delete_technology(
    technology_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    """Remove a technology together with all of its topics"""
    await get_technology_or_404(db, technology_id)

    await db.execute(delete(Topic).where(Topic.technology_id == technology_id))
    await db.execute(delete(Technology).where(Technology.id == technology_id))
    await db.commit()
    return SuccessResponse()
