"""
Ordered topics of a technology. Public reads, admin management.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from portal.core.database import get_db
from portal.core.exceptions import ResourceNotFoundError, ValidationError
from portal.models.learning import Technology, Topic
from portal.modules.auth import Privilege, get_privilege, require_admin
from portal.schemas.auth import SuccessResponse
from portal.schemas.catalog import TopicCreate, TopicListResponse, TopicEnvelope
from portal.schemas.session import Session
from portal.services.audit_log import AuditedRoute
from portal.utils.whitelist import apply_update, pick_fields

router = APIRouter(route_class=AuditedRoute)

ALLOWED_TOPIC_FIELDS = ["title", "content", "order_index", "is_active"]


async def get_topic_or_404(db: AsyncSession, topic_id: str) -> Topic:
    result = await db.execute(select(Topic).where(Topic.id == topic_id))
    topic = result.scalar_one_or_none()
    if not topic:
        raise ResourceNotFoundError("Topic", topic_id)
    return topic


async def get_parent_technology(db: AsyncSession, technology_id: Optional[str]) -> Technology:
    if not technology_id:
        raise ValidationError("Technology ID is required", field="technology_id")
    result = await db.execute(select(Technology).where(Technology.id == technology_id))
    technology = result.scalar_one_or_none()
    if not technology:
        raise ResourceNotFoundError("Technology", technology_id)
    return technology


@router.get("", response_model=TopicListResponse)
async def list_topics(
    technology_id: Optional[str] = Query(None),
    all_: bool = Query(False, alias="all"),
    db: AsyncSession = Depends(get_db),
    privilege: Privilege = Depends(get_privilege),
):
    query = select(Topic).order_by(Topic.order_index)
    if not (all_ and privilege.can_administer):
        query = query.where(Topic.is_active.is_(True))
    if technology_id:
        query = query.where(Topic.technology_id == technology_id)

    result = await db.execute(query)
    return {"topics": result.scalars().all()}


@router.post("", response_model=TopicEnvelope, status_code=201)
async def create_topic(
    payload: TopicCreate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    data = pick_fields(ALLOWED_TOPIC_FIELDS, payload.model_dump(exclude_unset=True))
    if not data.get("title"):
        raise ValidationError("Title is required", field="title")
    technology = await get_parent_technology(db, payload.technology_id)

    if data.get("is_active") is None:
        data["is_active"] = True
    if data.get("order_index") is None:
        # New topics go to the end of the technology
        data["order_index"] = len(technology.topics)

    topic = Topic(**data, technology=technology)
    db.add(topic)
    await db.commit()
    return {"topic": topic}


@router.get("/{topic_id}", response_model=TopicEnvelope)
async def get_topic(topic_id: str, db: AsyncSession = Depends(get_db)):
    return {"topic": await get_topic_or_404(db, topic_id)}


@router.put("/{topic_id}", response_model=TopicEnvelope)
async def update_topic(
    topic_id: str,
    payload: TopicCreate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    topic = await get_topic_or_404(db, topic_id)

    data = payload.model_dump(exclude_unset=True)
    if "title" in data and not data["title"]:
        raise ValidationError("Title cannot be empty", field="title")
    if "technology_id" in data and data["technology_id"] != topic.technology_id:
        topic.technology = await get_parent_technology(db, data["technology_id"])

    apply_update(topic, ALLOWED_TOPIC_FIELDS, data)
    await db.commit()
    return {"topic": topic}


@router.delete("/{topic_id}", response_model=SuccessResponse)
async def delete_topic(
    topic_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    await get_topic_or_404(db, topic_id)

    await db.execute(delete(Topic).where(Topic.id == topic_id))
    await db.commit()
    return SuccessResponse()
