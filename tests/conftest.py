"""
Global test fixtures for pytest.

Provides reusable fixtures for service and API testing:
- An isolated in-memory database per test, and a store bound to it
- Factories for users, consultant relationships and patients
- An application wired to its own database, sessions and upload directory
"""
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from clinisync.auth.sessions import SessionDirectory
from clinisync.common.database.database import Database
from clinisync.common.storage.file_storage import FileStorage
from clinisync.main import create_app
from clinisync.models.models import Consultant, User, UserRole
from clinisync.modules.patients import patients_service
from clinisync.modules.patients.schemas import PatientCreate

MEMORY_URL = "sqlite+aiosqlite://"
PASSWORD = "s3cret-pass"


# ============================================================================
# Storage
# ============================================================================

@pytest.fixture
async def database():
    db = Database(MEMORY_URL)
    await db.connect()
    yield db
    await db.close()


@pytest.fixture
async def store(database):
    """One unit of work held open for the whole test."""
    async with database.session() as store:
        yield store


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_user(store):
    async def _make_user(username, *roles, current_role=None, **fields):
        roles = roles or (UserRole.CLINICIAN,)
        fields.setdefault("name", username.title())
        fields.setdefault("email", f"{username}@smileclinic.com")
        return await store.create(
            User,
            username=username,
            password_hash="not-a-real-hash",
            roles=[role.value for role in roles],
            current_role=current_role or roles[0],
            **fields,
        )
    return _make_user


@pytest.fixture
def make_consultant(store):
    async def _make_consultant(clinic, consultant_user, specialty="Orthodontics", is_active=True):
        return await store.create(
            Consultant,
            user_id=consultant_user.id,
            clinic_id=clinic.id,
            specialty=specialty,
            is_active=is_active,
        )
    return _make_consultant


@pytest.fixture
def make_patient(store):
    async def _make_patient(actor, consultant, name="Jane Roe", total_cost="1000.00", **fields):
        data = PatientCreate(
            name=name,
            consultant_id=consultant.id,
            treatment_type="Braces",
            total_cost=Decimal(total_cost),
            **fields,
        )
        return await patients_service.create_patient(store, actor, data)
    return _make_patient


@pytest.fixture
async def clinic(make_user):
    return await make_user("smile", UserRole.CLINICIAN, clinic_name="Smile Clinic")


@pytest.fixture
async def other_clinic(make_user):
    return await make_user("bright", UserRole.CLINICIAN, clinic_name="Bright Dental")


@pytest.fixture
async def consultant_user(make_user):
    return await make_user("ortho", UserRole.CONSULTANT, specialty="Orthodontics")


@pytest.fixture
async def relationship(clinic, consultant_user, make_consultant):
    return await make_consultant(clinic, consultant_user)


# ============================================================================
# API
# ============================================================================

@pytest.fixture
async def app(tmp_path):
    # ASGITransport does not run the lifespan, so connect by hand
    database = Database(MEMORY_URL)
    await database.connect()
    application = create_app(
        database=database,
        sessions=SessionDirectory(),
        file_storage=FileStorage(tmp_path / "uploads", max_bytes=1024),
    )
    yield application
    await database.close()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as api_client:
        yield api_client


@pytest.fixture
def register(client):
    """Register a user through the API and return (user json, auth headers)."""
    async def _register(username, roles=("clinician",), current_role=None, **fields):
        payload = {
            "username": username,
            "password": PASSWORD,
            "confirm_password": PASSWORD,
            "name": username.title(),
            "email": f"{username}@smileclinic.com",
            "roles": list(roles),
            "current_role": current_role or roles[0],
            **fields,
        }
        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['access_token']}"}
    return _register
