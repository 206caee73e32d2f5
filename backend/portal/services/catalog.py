"""
Shared helpers for course/skill relations and course-gated visibility.
"""

from typing import Dict, Iterable, List, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.models.course import Course, StudentCourse
from portal.models.skill import Skill


def _unique(ids: Iterable[str]) -> List[str]:
    seen = []
    for item in ids:
        if item and item not in seen:
            seen.append(item)
    return seen


async def fetch_courses(db: AsyncSession, course_ids: Iterable[str]) -> List[Course]:
    """Courses for the given ids, in request order; unknown ids are dropped"""
    ids = _unique(course_ids)
    if not ids:
        return []
    result = await db.execute(select(Course).where(Course.id.in_(ids)))
    by_id = {course.id: course for course in result.scalars().all()}
    return [by_id[i] for i in ids if i in by_id]


async def fetch_skills(db: AsyncSession, skill_ids: Iterable[str]) -> Dict[str, Skill]:
    ids = _unique(skill_ids)
    if not ids:
        return {}
    result = await db.execute(select(Skill).where(Skill.id.in_(ids)))
    return {skill.id: skill for skill in result.scalars().all()}


async def student_course_ids(db: AsyncSession, student_id: str) -> Set[str]:
    result = await db.execute(select(StudentCourse.course_id).where(StudentCourse.student_id == student_id))
    return set(result.scalars().all())


def visible_to_student(course_links: Iterable, enrolled: Set[str]) -> bool:
    """Unrestricted items are visible to everyone, others only to enrolled students"""
    linked = {link.course_id for link in course_links}
    return not linked or bool(linked & enrolled)
