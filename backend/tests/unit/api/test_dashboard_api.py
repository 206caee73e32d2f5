"""
Unit Tests for the student dashboard
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient

from portal.models import (
    CertificateRequest,
    Job,
    JobCourse,
    StudentSkill,
    Task,
    TaskApplication,
    TaskCourse,
)


class TestDashboard:

    @pytest.mark.asyncio
    async def test_requires_session(self, client: AsyncClient):
        response = await client.get('/api/dashboard')

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_course_gated_content(
        self, client: AsyncClient, db_session, enrolled_student, student_headers, course, other_course, skill
    ):
        now = datetime.utcnow()
        open_task = Task(title='Open to all', is_active=True, task_courses=[], skill_rewards=[])
        db_session.add_all([
            Job(title='Everyone', company='A', is_active=True, job_courses=[], skill_requirements=[]),
            Job(title='Web only', company='B', is_active=True,
                job_courses=[JobCourse(course=course)], skill_requirements=[]),
            Job(title='Data only', company='C', is_active=True,
                job_courses=[JobCourse(course=other_course)], skill_requirements=[]),
            Job(title='Closed', company='D', is_active=False, job_courses=[], skill_requirements=[]),
            open_task,
            Task(title='Web task', is_active=True, deadline=now + timedelta(days=2),
                 task_courses=[TaskCourse(course=course)], skill_rewards=[]),
            Task(title='Expired', is_active=True, deadline=now - timedelta(days=1),
                 task_courses=[], skill_rewards=[]),
            Task(title='Data task', is_active=True,
                 task_courses=[TaskCourse(course=other_course)], skill_rewards=[]),
        ])
        await db_session.commit()
        db_session.add_all([
            StudentSkill(student_id=enrolled_student.id, skill=skill, proficiency_level=3),
            TaskApplication(student_id=enrolled_student.id, task_id=open_task.id, status='in_progress'),
            CertificateRequest(student_id=enrolled_student.id, address='Home', latitude=1.0, longitude=2.0,
                               status='pending'),
        ])
        await db_session.commit()

        response = await client.get('/api/dashboard', headers=student_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['student']['id'] == enrolled_student.id
        assert [c['name'] for c in data['student']['courses']] == ['Web Development']
        assert sorted(j['title'] for j in data['jobs']) == ['Everyone', 'Web only']
        assert [t['title'] for t in data['tasks']] == ['Web task', 'Open to all']
        assert data['skills'][0]['proficiency_level'] == 3
        assert data['skills'][0]['skill']['name'] == 'Python'
        assert data['applications'][0]['task_id'] == open_task.id
        assert data['certificate_request']['status'] == 'pending'

    @pytest.mark.asyncio
    async def test_empty_dashboard(self, client: AsyncClient, test_student, student_headers):
        response = await client.get('/api/dashboard', headers=student_headers)

        data = response.json()
        assert data['jobs'] == []
        assert data['tasks'] == []
        assert data['skills'] == []
        assert data['certificate_request'] is None
