from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import get_db
from portal.models.course import Course
from portal.schemas.catalog import CourseListResponse

router = APIRouter()


@router.get("", response_model=CourseListResponse)
async def list_courses(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Course).order_by(Course.name))
    return {"courses": result.scalars().all()}
