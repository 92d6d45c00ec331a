"""
Pytest Fixtures für die HR-Administration.

Fixtures sind wiederverwendbare Setup-Funktionen für Tests.
Sie werden automatisch von pytest erkannt und injiziert.
"""
import os

# Vor dem Import der App setzen, Settings werden beim Import gelesen
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from hr_admin.main import app
from hr_admin.database import Base, get_db
from hr_admin.models import User, Role, Department, Employee, EmploymentStatus, Position
from hr_admin.repositories.department_repository import DepartmentRepository
from hr_admin.services.department_service import DepartmentService
from hr_admin.utils.security import hash_password


# ============ DATENBANK SETUP ============

# SQLite im Speicher; StaticPool, damit alle Sessions dieselbe Verbindung nutzen
SQLALCHEMY_TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ============ BASIS FIXTURES ============

@pytest.fixture(scope="function")
def db():
    """
    Erstellt eine frische Datenbank für jeden Test.

    scope="function" bedeutet: Für JEDEN Test neu erstellen.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """
    FastAPI TestClient mit überschriebener Datenbank.

    Wichtig: Wir überschreiben get_db, damit die App
    unsere Test-DB verwendet statt der echten!
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def service(db):
    """DepartmentService direkt auf der Test-Session"""
    return DepartmentService(DepartmentRepository(db))


# ============ STAMMDATEN FIXTURES ============

def _make_role(db, name):
    role = Role(id=uuid4(), name=name)
    db.add(role)
    db.commit()
    db.refresh(role)
    return role


@pytest.fixture
def role_admin(db):
    return _make_role(db, "ADMIN")


@pytest.fixture
def role_hr(db):
    return _make_role(db, "HR")


@pytest.fixture
def role_manager(db):
    return _make_role(db, "MANAGER")


@pytest.fixture
def role_employee(db):
    return _make_role(db, "EMPLOYEE")


@pytest.fixture
def department(db):
    """Erstellt Test-Department"""
    dept = Department(id=uuid4(), name="Engineering", description="Builds things", is_active=True)
    db.add(dept)
    db.commit()
    db.refresh(dept)
    return dept


def make_department(db, name, parent=None, is_active=True, description=None):
    dept = Department(
        id=uuid4(),
        name=name,
        description=description,
        parent_id=parent.id if parent else None,
        is_active=is_active
    )
    db.add(dept)
    db.commit()
    db.refresh(dept)
    return dept


def make_employee(db, first_name="Erika", department=None, status=EmploymentStatus.ACTIVE, position=None):
    employee = Employee(
        id=uuid4(),
        employee_number=f"E-{uuid4().hex[:8]}",
        first_name=first_name,
        last_name="Mustermann",
        email=f"{first_name.lower()}.{uuid4().hex[:6]}@test.com",
        employment_status=status,
        department_id=department.id if department else None,
        position_id=position.id if position else None
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def make_position(db, title, department, is_active=True):
    position = Position(id=uuid4(), title=title, department_id=department.id, is_active=is_active)
    db.add(position)
    db.commit()
    db.refresh(position)
    return position


@pytest.fixture
def active_employee(db):
    """Aktiver Mitarbeiter ohne Abteilung, z.B. als Manager"""
    return make_employee(db, first_name="Max")


@pytest.fixture
def terminated_employee(db):
    return make_employee(db, first_name="Tom", status=EmploymentStatus.TERMINATED)


# ============ USER FIXTURES ============

def _make_user(db, role, name, email, password):
    user = User(
        id=uuid4(),
        name=name,
        email=email,
        password_hash=hash_password(password),
        role_id=role.id,
        is_active=True
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db, role_admin):
    return _make_user(db, role_admin, "Test Admin", "admin@test.com", "adminpass123")


@pytest.fixture
def hr_user(db, role_hr):
    return _make_user(db, role_hr, "Test HR", "hr@test.com", "hrpass123")


@pytest.fixture
def manager_user(db, role_manager):
    return _make_user(db, role_manager, "Test Manager", "manager@test.com", "managerpass123")


@pytest.fixture
def employee_user(db, role_employee):
    return _make_user(db, role_employee, "Test Employee", "employee@test.com", "employeepass123")


# ============ AUTH TOKEN FIXTURES ============

def _login(client, email, password):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, f"Login failed for {email}: {response.json()}"
    return response.json()["access_token"]


@pytest.fixture
def admin_token(client, admin_user):
    """Login als Admin, gibt Token zurück"""
    return _login(client, "admin@test.com", "adminpass123")


@pytest.fixture
def hr_token(client, hr_user):
    return _login(client, "hr@test.com", "hrpass123")


@pytest.fixture
def manager_token(client, manager_user):
    return _login(client, "manager@test.com", "managerpass123")


@pytest.fixture
def employee_token(client, employee_user):
    return _login(client, "employee@test.com", "employeepass123")


# ============ HELPER FUNKTIONEN ============

def auth_header(token: str) -> dict:
    """Erstellt Authorization Header"""
    return {"Authorization": f"Bearer {token}"}
