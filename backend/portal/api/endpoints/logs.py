"""
Admin view over the persisted API audit trail.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from datetime import datetime
from typing import Optional

from portal.core.config import settings
from portal.core.database import get_db
from portal.core.exceptions import ValidationError
from portal.models.api_log import ApiLog
from portal.modules.auth import require_admin
from portal.schemas.admin import ApiLogsResponse
from portal.schemas.session import Session
from portal.services.audit_log import PrivilegedAuditedRoute

router = APIRouter(route_class=PrivilegedAuditedRoute)


def _parse_date(value: str, field: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}", field=field)


def _status_condition(status: str):
    if status == "success":
        return and_(ApiLog.status_code >= 200, ApiLog.status_code < 300)
    if status == "error":
        return ApiLog.status_code >= 400
    if status.isdigit():
        return ApiLog.status_code == int(status)
    raise ValidationError("Invalid status filter", field="status")


@router.get("", response_model=ApiLogsResponse)
async def list_logs(
    method: Optional[str] = None,
    path: Optional[str] = None,
    status: Optional[str] = None,
    user_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_admin),
):
    """List API logs newest first with filtering and offset pagination"""
    conditions = []
    if method:
        conditions.append(ApiLog.method == method.upper())
    if path:
        conditions.append(ApiLog.path.ilike(f"%{path}%"))
    if status:
        conditions.append(_status_condition(status))
    if user_id:
        conditions.append(ApiLog.user_id == user_id)
    if start_date:
        conditions.append(ApiLog.timestamp >= _parse_date(start_date, "start_date"))
    if end_date:
        conditions.append(ApiLog.timestamp <= _parse_date(end_date, "end_date"))

    query = select(ApiLog)
    count_query = select(func.count(ApiLog.id))
    if conditions:
        query = query.where(and_(*conditions))
        count_query = count_query.where(and_(*conditions))

    total = await db.scalar(count_query)

    query = query.order_by(ApiLog.timestamp.desc()).offset(offset).limit(limit)
    result = await db.execute(query)

    return ApiLogsResponse(
        logs=result.scalars().all(),
        total=total or 0,
        limit=limit,
        offset=offset,
    )
