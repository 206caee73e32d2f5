"""
Admin student management.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from portal.core.config import settings
from portal.core.database import get_db
from portal.core.exceptions import ValidationError, StudentNotFoundError
from portal.models.student import Student
from portal.modules.auth import require_admin
from portal.schemas.session import Session
from portal.schemas.student import StudentCreate, StudentUpdate, StudentListResponse, StudentEnvelope
from portal.services.audit_log import PrivilegedAuditedRoute
from portal.services.otp_service import normalize_phone
from portal.utils.whitelist import apply_update, pick_fields

router = APIRouter(route_class=PrivilegedAuditedRoute)

ALLOWED_STUDENT_FIELDS = [
    "name", "phone", "personal_id", "email", "status", "group_name", "coins", "is_admin",
]


async def _ensure_phone_free(db: AsyncSession, phone: str, exclude_id: Optional[str] = None) -> None:
    query = select(Student.id).where(Student.phone == phone)
    if exclude_id:
        query = query.where(Student.id != exclude_id)
    result = await db.execute(query)
    if result.scalar_one_or_none() is not None:
        raise ValidationError("A student with this phone already exists", field="phone")


@router.get("", response_model=StudentListResponse)
async def list_students(
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    """Search students by name, phone or email"""
    query = select(Student)
    if search:
        search_term = f"%{search}%"
        query = query.where(or_(
            Student.name.ilike(search_term),
            Student.phone.ilike(search_term),
            Student.email.ilike(search_term),
        ))
    query = query.order_by(Student.name).limit(settings.STUDENT_SEARCH_LIMIT)

    result = await db.execute(query)
    return StudentListResponse(students=result.scalars().all())


@router.post("", response_model=StudentEnvelope, status_code=201)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    data = pick_fields(ALLOWED_STUDENT_FIELDS, payload.model_dump(exclude_unset=True))
    if not data.get("name") or not data.get("phone"):
        raise ValidationError("Name and phone are required")

    data["phone"] = normalize_phone(data["phone"])
    await _ensure_phone_free(db, data["phone"])

    student = Student(**data)
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return StudentEnvelope(student=student)


@router.put("", response_model=StudentEnvelope)
async def update_student(
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    if not payload.id:
        raise ValidationError("Student ID is required", field="id")

    result = await db.execute(select(Student).where(Student.id == payload.id))
    student = result.scalar_one_or_none()
    if not student:
        raise StudentNotFoundError(payload.id)

    data = payload.model_dump(exclude_unset=True)
    if "name" in data and not data["name"]:
        raise ValidationError("Name cannot be empty", field="name")
    if "phone" in data:
        data["phone"] = normalize_phone(data["phone"])
        await _ensure_phone_free(db, data["phone"], exclude_id=student.id)

    apply_update(student, ALLOWED_STUDENT_FIELDS, data)
    await db.commit()
    await db.refresh(student)
    return StudentEnvelope(student=student)
