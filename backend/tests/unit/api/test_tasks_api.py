"""
Unit Tests for tasks and the student task workflow
"""
import pytest
import pytest_asyncio
from datetime import datetime, timedelta
from httpx import AsyncClient
from sqlalchemy import select

from portal.models import Task, TaskApplication, TaskCourse, TaskSkillReward


def make_task(**fields) -> Task:
    data = {'title': 'Build a REST API', 'is_active': True, 'task_courses': [], 'skill_rewards': []}
    data.update(fields)
    return Task(**data)


@pytest_asyncio.fixture
async def task(db_session, course, skill) -> Task:
    task = make_task(
        deadline=datetime.utcnow() + timedelta(days=7),
        task_courses=[TaskCourse(course=course)],
        skill_rewards=[TaskSkillReward(skill=skill, level_reward=2)],
    )
    db_session.add(task)
    await db_session.commit()
    return task


class TestListTasks:

    @pytest.mark.asyncio
    async def test_ordered_by_deadline_nulls_last(self, client: AsyncClient, db_session):
        now = datetime.utcnow()
        db_session.add_all([
            make_task(title='Open ended'),
            make_task(title='Later', deadline=now + timedelta(days=10)),
            make_task(title='Sooner', deadline=now + timedelta(days=1)),
            make_task(title='Hidden', is_active=False),
        ])
        await db_session.commit()

        response = await client.get('/api/tasks')

        assert [t['title'] for t in response.json()['tasks']] == ['Sooner', 'Later', 'Open ended']

    @pytest.mark.asyncio
    async def test_all_requires_admin(self, client: AsyncClient, student_headers):
        response = await client.get('/api/tasks?all=true', headers=student_headers)

        assert response.status_code == 403


class TestManageTasks:

    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient, admin_headers, course, skill):
        response = await client.post(
            '/api/tasks',
            json={
                'title': 'Write unit tests',
                'deadline': '2030-01-15T12:00:00Z',
                'course_ids': [course.id],
                'skill_rewards': [{'skill_id': skill.id}],
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        task = response.json()['task']
        assert task['deadline'].startswith('2030-01-15T12:00:00')
        assert task['courses'][0]['id'] == course.id
        assert task['skill_rewards'][0]['level_reward'] == 1

    @pytest.mark.asyncio
    async def test_title_required(self, client: AsyncClient, admin_headers):
        response = await client.post('/api/tasks', json={'description': 'x'}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'Title is required'

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, admin_headers, task):
        response = await client.put(
            f'/api/tasks/{task.id}', json={'description': 'Now with docs', 'is_active': False}, headers=admin_headers
        )

        data = response.json()['task']
        assert data['description'] == 'Now with docs'
        assert data['is_active'] is False
        assert len(data['skill_rewards']) == 1

    @pytest.mark.asyncio
    async def test_delete_removes_applications(self, client: AsyncClient, db_session, admin_headers, task, test_student):
        db_session.add(TaskApplication(student_id=test_student.id, task_id=task.id, status='in_progress'))
        await db_session.commit()
        task_id = task.id

        response = await client.delete(f'/api/tasks/{task_id}', headers=admin_headers)

        assert response.status_code == 200
        assert (await client.get(f'/api/tasks/{task_id}')).status_code == 404
        result = await db_session.execute(select(TaskApplication.id).where(TaskApplication.task_id == task_id))
        assert result.first() is None

    @pytest.mark.asyncio
    async def test_duplicate_has_no_deadline(self, client: AsyncClient, admin_headers, task):
        response = await client.post(f'/api/tasks/{task.id}/duplicate', headers=admin_headers)

        assert response.status_code == 201
        copy = response.json()['task']
        assert copy['title'] == 'Build a REST API (copy)'
        assert copy['deadline'] is None
        assert copy['is_active'] is False
        assert copy['skill_rewards'][0]['level_reward'] == 2


class TestTaskWorkflow:

    @pytest.mark.asyncio
    async def test_apply_then_submit(self, client: AsyncClient, student_headers, task):
        applied = await client.post(f'/api/tasks/{task.id}/apply', headers=student_headers)
        paused = await client.put(f'/api/tasks/{task.id}/apply', json={'status': 'paused'}, headers=student_headers)
        done = await client.put(
            f'/api/tasks/{task.id}/apply',
            json={'status': 'done', 'submission': 'https://github.com/me/api'},
            headers=student_headers,
        )
        status = await client.get(f'/api/tasks/{task.id}/apply', headers=student_headers)

        assert applied.json()['application']['status'] == 'in_progress'
        assert paused.json()['application']['status'] == 'paused'
        assert done.json()['application']['submission'] == 'https://github.com/me/api'
        assert status.json()['applied'] is True
        assert status.json()['application']['status'] == 'done'

    @pytest.mark.asyncio
    async def test_done_requires_submission(self, client: AsyncClient, student_headers, task):
        await client.post(f'/api/tasks/{task.id}/apply', headers=student_headers)

        response = await client.put(f'/api/tasks/{task.id}/apply', json={'status': 'done'}, headers=student_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'Submission is required when marking task as done'

    @pytest.mark.asyncio
    async def test_student_cannot_approve(self, client: AsyncClient, student_headers, task):
        await client.post(f'/api/tasks/{task.id}/apply', headers=student_headers)

        response = await client.put(f'/api/tasks/{task.id}/apply', json={'status': 'approved'}, headers=student_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_past_deadline(self, client: AsyncClient, db_session, student_headers):
        task = make_task(deadline=datetime.utcnow() - timedelta(hours=1))
        db_session.add(task)
        await db_session.commit()

        response = await client.post(f'/api/tasks/{task.id}/apply', headers=student_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'The deadline for this task has passed'

    @pytest.mark.asyncio
    async def test_apply_twice(self, client: AsyncClient, student_headers, task):
        await client.post(f'/api/tasks/{task.id}/apply', headers=student_headers)

        response = await client.post(f'/api/tasks/{task.id}/apply', headers=student_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_reviewed_application_is_immutable(self, client: AsyncClient, db_session, test_student, student_headers, task):
        application = TaskApplication(student_id=test_student.id, task_id=task.id, status='approved')
        db_session.add(application)
        await db_session.commit()

        update = await client.put(f'/api/tasks/{task.id}/apply', json={'status': 'paused'}, headers=student_headers)
        cancel = await client.delete(f'/api/tasks/{task.id}/apply', headers=student_headers)

        assert update.status_code == 400
        assert update.json()['error'] == 'Cannot update approved or rejected application'
        assert cancel.status_code == 400
        assert cancel.json()['error'] == 'Cannot cancel approved application'

    @pytest.mark.asyncio
    async def test_cancel(self, client: AsyncClient, student_headers, task):
        await client.post(f'/api/tasks/{task.id}/apply', headers=student_headers)

        response = await client.delete(f'/api/tasks/{task.id}/apply', headers=student_headers)
        status = await client.get(f'/api/tasks/{task.id}/apply', headers=student_headers)

        assert response.status_code == 200
        assert status.json() == {'applied': False, 'application': None}

    @pytest.mark.asyncio
    async def test_update_without_application(self, client: AsyncClient, student_headers, task):
        response = await client.put(f'/api/tasks/{task.id}/apply', json={'status': 'paused'}, headers=student_headers)

        assert response.status_code == 404
