"""
Integration Tests - full login, impersonation and error-format flows
"""
import pytest
from unittest.mock import AsyncMock, patch
from httpx import AsyncClient

from portal.core.security import decode_session_token
from portal.services.sms_service import sms_service


def cookie(response) -> dict:
    return {'Cookie': f"session={response.cookies['session']}"}


async def login(client: AsyncClient, phone: str) -> dict:
    with patch.object(sms_service, 'send_otp', new=AsyncMock(return_value=True)) as sms:
        await client.post('/api/auth/send-otp', json={'phone': phone})
        code = sms.await_args.args[1]

    response = await client.post('/api/auth/verify-otp', json={'phone': phone, 'code': code})
    assert response.status_code == 200
    return cookie(response)


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get('/health')

        assert response.status_code == 200
        assert response.json() == {'status': 'healthy'}

    @pytest.mark.asyncio
    async def test_security_headers(self, client: AsyncClient):
        response = await client.get('/health')

        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert 'X-Request-ID' in response.headers


class TestErrorFormat:

    @pytest.mark.asyncio
    async def test_malformed_body_is_400(self, client: AsyncClient, admin_headers):
        response = await client.post(
            '/api/jobs', json={'title': 'T', 'company': 'C', 'open_positions': 'many'}, headers=admin_headers
        )

        assert response.status_code == 400
        data = response.json()
        assert data['error'] == 'Invalid request body'
        assert data['code'] == 'VALIDATION_ERROR'

    @pytest.mark.asyncio
    async def test_unauthorized_body(self, client: AsyncClient):
        response = await client.get('/api/dashboard')

        assert response.json() == {'error': 'Unauthorized', 'code': 'UNAUTHORIZED'}

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get('/api/no-such-resource')

        assert response.status_code == 404
        assert response.json() == {'error': 'Not Found'}

    @pytest.mark.asyncio
    async def test_wrong_method_keeps_allow_header(self, client: AsyncClient):
        response = await client.post('/api/courses', json={})

        assert response.status_code == 405
        assert response.json() == {'error': 'Method Not Allowed'}
        assert 'GET' in response.headers['Allow']


class TestLoginFlow:

    @pytest.mark.asyncio
    async def test_student_login_to_logout(self, client: AsyncClient, test_student):
        headers = await login(client, test_student.phone)

        dashboard = await client.get('/api/dashboard', headers=headers)
        assert dashboard.status_code == 200
        assert dashboard.json()['student']['name'] == test_student.name

        logout = await client.post('/api/auth/logout', headers=headers)
        assert logout.status_code == 200

    @pytest.mark.asyncio
    async def test_admin_impersonation_round_trip(self, client: AsyncClient, admin_student, test_student):
        admin = await login(client, admin_student.phone)
        assert (await client.get('/api/logs', headers=admin)).status_code == 200

        started = await client.post('/api/admin/impersonate', json={'studentId': test_student.id}, headers=admin)
        as_student = cookie(started)

        session = (await client.get('/api/auth/session', headers=as_student)).json()['session']
        assert session['studentId'] == test_student.id
        assert session['originalAdmin']['studentId'] == admin_student.id
        assert (await client.get('/api/dashboard', headers=as_student)).json()['student']['id'] == test_student.id
        assert (await client.get('/api/logs', headers=as_student)).status_code == 403

        stopped = await client.post('/api/admin/stop-impersonate', headers=as_student)
        restored = decode_session_token(stopped.cookies['session'])
        assert restored['studentId'] == admin_student.id
        assert restored['isAdmin'] is True
        assert (await client.get('/api/logs', headers=cookie(stopped))).status_code == 200
