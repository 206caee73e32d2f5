"""
Unit Tests for request logging middleware
"""
import logging
import pytest
from httpx import AsyncClient

from portal.core.logging_config import get_request_id, get_user_id
from portal.core.middleware import identity_extra
from portal.models import Student
from portal.modules.auth import build_session
from portal.schemas.session import OriginalAdmin


def completion_records(caplog, path: str):
    return [
        r for r in caplog.records
        if getattr(r, 'event_type', None) == 'http_request_complete' and r.http_path == path
    ]


class TestIdentityExtra:

    def test_anonymous(self):
        assert identity_extra(None) == {'student_id': None}

    def test_student_session(self):
        student = Student(id='student-1', phone='599000001', name='Nino', is_admin=False)

        assert identity_extra(build_session(student)) == {'student_id': 'student-1'}

    def test_impersonated_session_names_admin(self):
        student = Student(id='student-1', phone='599000001', name='Nino', is_admin=False)
        admin = OriginalAdmin(student_id='admin-1', phone='599000002', name='Admin')

        session = build_session(student, original_admin=admin)

        assert identity_extra(session) == {'student_id': 'student-1', 'impersonated_by': 'admin-1'}


class TestRequestLogging:

    @pytest.mark.asyncio
    async def test_completion_log_names_student(self, client: AsyncClient, caplog, test_student, student_headers):
        caplog.set_level(logging.INFO, logger='portal')

        response = await client.get('/api/dashboard', headers={**student_headers, 'X-Request-ID': 'req-42'})

        assert response.headers['X-Request-ID'] == 'req-42'
        records = completion_records(caplog, '/api/dashboard')
        assert len(records) == 1
        assert records[0].student_id == test_student.id
        assert records[0].http_status == 200
        assert not hasattr(records[0], 'impersonated_by')

    @pytest.mark.asyncio
    async def test_completion_log_names_impersonating_admin(
        self, client: AsyncClient, caplog, test_student, admin_student, impersonation_headers
    ):
        caplog.set_level(logging.INFO, logger='portal')

        await client.get('/api/dashboard', headers=impersonation_headers)

        record = completion_records(caplog, '/api/dashboard')[0]
        assert record.student_id == test_student.id
        assert record.impersonated_by == admin_student.id

    @pytest.mark.asyncio
    async def test_failed_request_logged_as_warning(self, client: AsyncClient, caplog):
        caplog.set_level(logging.INFO, logger='portal')

        await client.get('/api/dashboard')

        record = completion_records(caplog, '/api/dashboard')[0]
        assert record.levelno == logging.WARNING
        assert record.student_id is None

    @pytest.mark.asyncio
    async def test_health_is_not_logged(self, client: AsyncClient, caplog):
        caplog.set_level(logging.INFO, logger='portal')

        response = await client.get('/health')

        assert 'X-Request-ID' in response.headers
        assert completion_records(caplog, '/health') == []

    @pytest.mark.asyncio
    async def test_context_is_reset_after_request(self, client: AsyncClient, student_headers):
        await client.get('/api/dashboard', headers=student_headers)

        assert get_request_id() == ''
        assert get_user_id() == ''
