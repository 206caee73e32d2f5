"""
Student Portal - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Optional
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_portal.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['SESSION_SECRET_KEY'] = 'test-session-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['SMS_API_KEY'] = ''

from portal.main import app
from portal.core.database import Base, get_db
from portal.core.security import encode_session_token
from portal.models import Course, Skill, Student, StudentCourse
from portal.modules.auth import build_session
from portal.schemas.session import OriginalAdmin
from portal.services.audit_log import audit_log_writer

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_portal.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


def fake_phone() -> str:
    """Nine-digit mobile number starting with 5"""
    return '5' + fake.numerify('########')


def session_cookie(student: Student, original_admin: Optional[Student] = None, **overrides) -> dict:
    """Cookie header carrying a signed session for ``student``"""
    admin = None
    if original_admin is not None:
        admin = OriginalAdmin(
            student_id=original_admin.id,
            phone=original_admin.phone,
            name=original_admin.name,
        )
    session = build_session(student, original_admin=admin)
    payload = session.to_payload()
    payload.update(overrides)
    return {'Cookie': f'session={encode_session_token(payload)}'}


@pytest_asyncio.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    original_factory = audit_log_writer.session_factory
    audit_log_writer.session_factory = TestSessionLocal

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    audit_log_writer.session_factory = original_factory
    app.dependency_overrides.clear()


async def create_student(db_session: AsyncSession, **fields) -> Student:
    data = {
        'name': fake.name(),
        'phone': fake_phone(),
        'email': fake.email(),
        'group_name': 'G-1',
        'is_admin': False,
    }
    data.update(fields)
    student = Student(**data)
    db_session.add(student)
    await db_session.commit()
    await db_session.refresh(student)
    return student


@pytest_asyncio.fixture
async def test_student(db_session: AsyncSession) -> Student:
    """Create a regular student"""
    return await create_student(db_session)


@pytest_asyncio.fixture
async def admin_student(db_session: AsyncSession) -> Student:
    """Create a student with the admin flag set"""
    return await create_student(db_session, is_admin=True)


@pytest.fixture
def student_headers(test_student: Student) -> dict:
    return session_cookie(test_student)


@pytest.fixture
def admin_headers(admin_student: Student) -> dict:
    return session_cookie(admin_student)


@pytest.fixture
def impersonation_headers(test_student: Student, admin_student: Student) -> dict:
    """Admin acting as ``test_student``"""
    return session_cookie(test_student, original_admin=admin_student)


@pytest.fixture
def cookie_for():
    """Factory for session cookie headers, e.g. with forged claims"""
    return session_cookie


@pytest.fixture
def student_factory(db_session: AsyncSession):
    """Create extra students: ``await student_factory(name=...)``"""
    async def factory(**fields) -> Student:
        return await create_student(db_session, **fields)
    return factory


@pytest_asyncio.fixture
async def course(db_session: AsyncSession) -> Course:
    course = Course(name='Web Development', slug='web-development')
    db_session.add(course)
    await db_session.commit()
    return course


@pytest_asyncio.fixture
async def other_course(db_session: AsyncSession) -> Course:
    course = Course(name='Data Science', slug='data-science')
    db_session.add(course)
    await db_session.commit()
    return course


@pytest_asyncio.fixture
async def skill(db_session: AsyncSession) -> Skill:
    skill = Skill(name='Python', description='Backend development', is_active=True)
    db_session.add(skill)
    await db_session.commit()
    return skill


@pytest_asyncio.fixture
async def enrolled_student(db_session: AsyncSession, test_student: Student, course: Course) -> Student:
    """``test_student`` enrolled in ``course``"""
    db_session.add(StudentCourse(student=test_student, course=course))
    await db_session.commit()
    return test_student
