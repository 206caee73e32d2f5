"""
Unit Tests for admin impersonation
"""
import pytest
from httpx import AsyncClient

from portal.core.security import decode_session_token


def cookie_from(response) -> dict:
    return {'Cookie': f"session={response.cookies['session']}"}


class TestStartImpersonation:

    @pytest.mark.asyncio
    async def test_admin_becomes_student(self, client: AsyncClient, admin_student, test_student, admin_headers):
        response = await client.post(
            '/api/admin/impersonate', json={'studentId': test_student.id}, headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data['message'] == f'Now impersonating {test_student.name}'
        assert data['student']['phone'] == test_student.phone

        payload = decode_session_token(response.cookies['session'])
        assert payload['studentId'] == test_student.id
        assert payload['isAdmin'] is False
        assert payload['isImpersonating'] is True
        assert payload['originalAdmin']['studentId'] == admin_student.id

    @pytest.mark.asyncio
    async def test_requires_session(self, client: AsyncClient, test_student):
        response = await client.post('/api/admin/impersonate', json={'studentId': test_student.id})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_admin_is_forbidden(self, client: AsyncClient, test_student, student_headers):
        response = await client.post(
            '/api/admin/impersonate', json={'studentId': test_student.id}, headers=student_headers
        )

        assert response.status_code == 403
        assert response.json()['error'] == 'Forbidden: Admin access required'

    @pytest.mark.asyncio
    async def test_forged_admin_cookie_is_forbidden(self, client: AsyncClient, test_student, cookie_for):
        headers = cookie_for(test_student, isAdmin=True)

        response = await client.post(
            '/api/admin/impersonate', json={'studentId': test_student.id}, headers=headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_student(self, client: AsyncClient, admin_headers):
        response = await client.post(
            '/api/admin/impersonate', json={'studentId': 'missing-id'}, headers=admin_headers
        )

        assert response.status_code == 404
        assert response.json()['error'] == 'Student not found'

    @pytest.mark.asyncio
    async def test_missing_student_id(self, client: AsyncClient, admin_headers):
        response = await client.post('/api/admin/impersonate', json={}, headers=admin_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_impersonated_session_cannot_use_admin_routes(
        self, client: AsyncClient, test_student, impersonation_headers
    ):
        students = await client.get('/api/admin/students', headers=impersonation_headers)
        nested = await client.post(
            '/api/admin/impersonate', json={'studentId': test_student.id}, headers=impersonation_headers
        )
        jobs = await client.get('/api/jobs?all=true', headers=impersonation_headers)

        assert students.status_code == 403
        assert nested.status_code == 403
        assert jobs.status_code == 403


class TestStopImpersonation:

    @pytest.mark.asyncio
    async def test_returns_to_admin(self, client: AsyncClient, admin_student, impersonation_headers):
        response = await client.post('/api/admin/stop-impersonate', headers=impersonation_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['message'] == f'Returned to admin account: {admin_student.name}'
        assert data['admin']['id'] == admin_student.id

        payload = decode_session_token(response.cookies['session'])
        assert payload['studentId'] == admin_student.id
        assert payload['isAdmin'] is True
        assert payload['isImpersonating'] is False
        assert 'originalAdmin' not in payload

    @pytest.mark.asyncio
    async def test_round_trip_restores_admin_access(
        self, client: AsyncClient, test_student, admin_headers
    ):
        started = await client.post(
            '/api/admin/impersonate', json={'studentId': test_student.id}, headers=admin_headers
        )
        as_student = cookie_from(started)
        assert (await client.get('/api/admin/students', headers=as_student)).status_code == 403

        stopped = await client.post('/api/admin/stop-impersonate', headers=as_student)
        as_admin = cookie_from(stopped)

        assert (await client.get('/api/admin/students', headers=as_admin)).status_code == 200

    @pytest.mark.asyncio
    async def test_revoked_admin_is_logged_out(
        self, client: AsyncClient, db_session, admin_student, impersonation_headers
    ):
        admin_student.is_admin = False
        await db_session.commit()

        response = await client.post('/api/admin/stop-impersonate', headers=impersonation_headers)

        assert response.status_code == 401
        assert response.json()['error'] == 'Original admin session is no longer valid'
        assert 'Max-Age=0' in response.headers['set-cookie']

    @pytest.mark.asyncio
    async def test_not_impersonating(self, client: AsyncClient, admin_headers):
        response = await client.post('/api/admin/stop-impersonate', headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'Not currently impersonating anyone'

    @pytest.mark.asyncio
    async def test_requires_session(self, client: AsyncClient):
        response = await client.post('/api/admin/stop-impersonate')

        assert response.status_code == 401
