from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import get_db
from portal.core.exceptions import ResourceNotFoundError, ValidationError
from portal.models.job import JobSkillRequirement
from portal.models.skill import Skill, StudentSkill
from portal.models.task import TaskSkillReward
from portal.modules.auth import Privilege, get_privilege, require_admin
from portal.schemas.auth import SuccessResponse
from portal.schemas.catalog import SkillCreate, SkillListResponse, SkillEnvelope
from portal.schemas.session import Session
from portal.services.audit_log import AuditedRoute
from portal.utils.whitelist import apply_update, pick_fields

router = APIRouter(route_class=AuditedRoute)

ALLOWED_SKILL_FIELDS = ["name", "description", "icon", "is_active"]


async def get_skill_or_404(db: AsyncSession, skill_id: str) -> Skill:
    result = await db.execute(select(Skill).where(Skill.id == skill_id))
    skill = result.scalar_one_or_none()
    if not skill:
        raise ResourceNotFoundError("Skill", skill_id)
    return skill


@router.get("", response_model=SkillListResponse)
async def list_skills(
    all_: bool = Query(False, alias="all"),
    db: AsyncSession = Depends(get_db),
    privilege: Privilege = Depends(get_privilege),
):
    """Active skills by name; admins may pass ``all=true`` to include inactive ones"""
    query = select(Skill).order_by(Skill.name)
    if not (all_ and privilege.can_administer):
        query = query.where(Skill.is_active.is_(True))

    result = await db.execute(query)
    return {"skills": result.scalars().all()}


@router.post("", response_model=SkillEnvelope, status_code=201)
async def create_skill(
    payload: SkillCreate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    data = pick_fields(ALLOWED_SKILL_FIELDS, payload.model_dump(exclude_unset=True))
    if not data.get("name"):
        raise ValidationError("Name is required", field="name")
    if data.get("is_active") is None:
        data["is_active"] = True

    skill = Skill(**data)
    db.add(skill)
    await db.commit()
    return {"skill": skill}


@router.get("/{skill_id}", response_model=SkillEnvelope)
async def get_skill(skill_id: str, db: AsyncSession = Depends(get_db)):
    return {"skill": await get_skill_or_404(db, skill_id)}


@router.put("/{skill_id}", response_model=SkillEnvelope)
async def update_skill(
    skill_id: str,
    payload: SkillCreate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    skill = await get_skill_or_404(db, skill_id)

    data = payload.model_dump(exclude_unset=True)
    if "name" in data and not data["name"]:
        raise ValidationError("Name cannot be empty", field="name")

    apply_update(skill, ALLOWED_SKILL_FIELDS, data)
    await db.commit()
    return {"skill": skill}


@router.delete("/{skill_id}", response_model=SuccessResponse)
async def delete_skill(
    skill_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    """Remove a skill along with student levels, job requirements and task rewards that use it"""
    await get_skill_or_404(db, skill_id)

    await db.execute(delete(StudentSkill).where(StudentSkill.skill_id == skill_id))
    await db.execute(delete(JobSkillRequirement).where(JobSkillRequirement.skill_id == skill_id))
    await db.execute(delete(TaskSkillReward).where(TaskSkillReward.skill_id == skill_id))
    await db.execute(delete(Skill).where(Skill.id == skill_id))
    await db.commit()
    return SuccessResponse()
