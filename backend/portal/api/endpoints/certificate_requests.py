"""
Certificate delivery requests: students ask, admins reject, send and deliver.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import get_db
from portal.core.exceptions import ForbiddenError, ResourceNotFoundError, UnauthorizedError, ValidationError
from portal.models.certificate_request import (
    CertificateRequest,
    CertificateStatus,
    ACTIVE_CERTIFICATE_STATUSES,
)
from portal.modules.auth import Privilege, get_privilege, require_admin, require_session
from portal.schemas.auth import SuccessResponse
from portal.schemas.certificate import (
    CertificateRequestCreate,
    CertificateRequestReview,
    CertificateRequestEnvelope,
    CertificateRequestListResponse,
)
from portal.schemas.session import Session
from portal.services.audit_log import AuditedRoute

router = APIRouter(route_class=AuditedRoute)

VALID_STATUSES = {status.value for status in CertificateStatus}


async def latest_request_for(db: AsyncSession, student_id: str):
    result = await db.execute(
        select(CertificateRequest)
        .where(CertificateRequest.student_id == student_id)
        .order_by(CertificateRequest.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


@router.get("")
async def get_certificate_requests(
    all_: bool = Query(False, alias="all"),
    db: AsyncSession = Depends(get_db),
    privilege: Privilege = Depends(get_privilege),
):
    """
    The caller's latest request, or with ``all=true`` (admin only) every
    request with its student.
    """
    if privilege.session is None:
        raise UnauthorizedError()

    if all_:
        if not privilege.can_administer:
            raise ForbiddenError()
        result = await db.execute(select(CertificateRequest).order_by(CertificateRequest.created_at.desc()))
        return CertificateRequestListResponse(requests=result.scalars().all())

    latest = await latest_request_for(db, privilege.session.student_id)
    return CertificateRequestEnvelope(request=latest)


@router.post("", response_model=CertificateRequestEnvelope, status_code=201)
async def create_certificate_request(
    payload: CertificateRequestCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_session),
):
    address = (payload.address or "").strip()
    if not address:
        raise ValidationError("Address is required", field="address")
    if payload.latitude is None or payload.longitude is None:
        raise ValidationError("Location coordinates are required")

    result = await db.execute(
        select(CertificateRequest.id).where(
            CertificateRequest.student_id == session.student_id,
            CertificateRequest.status.in_(ACTIVE_CERTIFICATE_STATUSES),
        )
    )
    if result.first() is not None:
        raise ValidationError("You already have an active certificate request")

    request = CertificateRequest(
        student_id=session.student_id,
        address=address,
        latitude=payload.latitude,
        longitude=payload.longitude,
        additional_info=(payload.additional_info or "").strip() or None,
        status=CertificateStatus.PENDING.value,
    )
    db.add(request)
    await db.commit()
    return {"request": request}


@router.put("/{request_id}", response_model=CertificateRequestEnvelope)
async def review_certificate_request(
    request_id: str,
    payload: CertificateRequestReview,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    """Move a request through its workflow; each status clears the fields that no longer apply"""
    if not payload.status:
        raise ValidationError("Status is required", field="status")
    if payload.status not in VALID_STATUSES:
        raise ValidationError("Invalid status", field="status")

    reason = (payload.rejection_reason or "").strip()
    if payload.status == CertificateStatus.REJECTED.value and not reason:
        raise ValidationError("Rejection reason is required", field="rejection_reason")
    if payload.status == CertificateStatus.SENT.value and not payload.estimated_arrival:
        raise ValidationError("Estimated arrival date is required", field="estimated_arrival")

    result = await db.execute(select(CertificateRequest).where(CertificateRequest.id == request_id))
    request = result.scalar_one_or_none()
    if not request:
        raise ResourceNotFoundError("Certificate request", request_id)

    request.status = payload.status
    if payload.status == CertificateStatus.REJECTED.value:
        request.rejection_reason = reason
        request.estimated_arrival = None
    elif payload.status == CertificateStatus.SENT.value:
        request.estimated_arrival = payload.estimated_arrival
        request.rejection_reason = None
    elif payload.status == CertificateStatus.DELIVERED.value:
        request.rejection_reason = None

    await db.commit()
    return {"request": request}


@router.delete("/{request_id}", response_model=SuccessResponse)
async def delete_certificate_request(
    request_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    result = await db.execute(select(CertificateRequest).where(CertificateRequest.id == request_id))
    request = result.scalar_one_or_none()
    if not request:
        raise ResourceNotFoundError("Certificate request", request_id)

    await db.delete(request)
    await db.commit()
    return SuccessResponse()
