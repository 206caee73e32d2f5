"""
Unit Tests for admin student management
"""
import pytest
from httpx import AsyncClient


class TestListStudents:

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, client: AsyncClient, admin_headers, student_factory):
        await student_factory(name='Giorgi Kapanadze')
        await student_factory(name='Mariam Lomidze')

        response = await client.get('/api/admin/students', params={'search': 'kapan'}, headers=admin_headers)

        assert response.status_code == 200
        names = [s['name'] for s in response.json()['students']]
        assert names == ['Giorgi Kapanadze']

    @pytest.mark.asyncio
    async def test_search_by_phone(self, client: AsyncClient, admin_headers, test_student):
        response = await client.get(
            '/api/admin/students', params={'search': test_student.phone[-4:]}, headers=admin_headers
        )

        ids = [s['id'] for s in response.json()['students']]
        assert test_student.id in ids

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, student_headers):
        response = await client.get('/api/admin/students', headers=student_headers)

        assert response.status_code == 403


class TestCreateStudent:

    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient, admin_headers):
        response = await client.post(
            '/api/admin/students',
            json={'name': 'Luka Beridze', 'phone': '+995 555 11 22 33', 'group_name': 'G-7'},
            headers=admin_headers,
        )

        assert response.status_code == 201
        student = response.json()['student']
        assert student['phone'] == '995555112233'
        assert student['group_name'] == 'G-7'
        assert student['is_admin'] is False

    @pytest.mark.asyncio
    async def test_name_and_phone_required(self, client: AsyncClient, admin_headers):
        response = await client.post('/api/admin/students', json={'name': 'No Phone'}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'Name and phone are required'

    @pytest.mark.asyncio
    async def test_duplicate_phone(self, client: AsyncClient, admin_headers, test_student):
        response = await client.post(
            '/api/admin/students', json={'name': 'Copy', 'phone': test_student.phone}, headers=admin_headers
        )

        assert response.status_code == 400


class TestUpdateStudent:

    @pytest.mark.asyncio
    async def test_update_whitelisted_fields(self, client: AsyncClient, admin_headers, test_student):
        response = await client.put(
            '/api/admin/students',
            json={'id': test_student.id, 'coins': 40, 'status': 'active'},
            headers=admin_headers,
        )

        assert response.status_code == 200
        student = response.json()['student']
        assert student['coins'] == 40
        assert student['status'] == 'active'

    @pytest.mark.asyncio
    async def test_missing_student(self, client: AsyncClient, admin_headers):
        response = await client.put('/api/admin/students', json={'id': 'nope', 'coins': 1}, headers=admin_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_id_required(self, client: AsyncClient, admin_headers):
        response = await client.put('/api/admin/students', json={'coins': 1}, headers=admin_headers)

        assert response.status_code == 400
