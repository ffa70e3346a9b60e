"""Shared fixtures: in-memory SQLite, seeded roles/permissions, token helpers."""

import os

# Settings are read at import time, so the environment must be ready first.
os.environ.update({
    "DATABASE_URL": "sqlite://",
    "PASSWORD_SECRET": "test-password-secret",
    "ACCESS_TOKEN_SECRET": "test-access-secret",
    "ACCESS_TOKEN_EXPIRE_MINUTES": "15",
    "REFRESH_TOKEN_SECRET": "test-refresh-secret",
    "REFRESH_TOKEN_EXPIRE_DAYS": "7",
    "RESET_PASSWORD_SECRET": "test-reset-secret",
    "RESET_PASSWORD_EXPIRE_MINUTES": "15",
    "MINIO_ENDPOINT": "localhost:9000",
    "MINIO_ACCESS_KEY": "minio",
    "MINIO_SECRET_KEY": "minio-secret",
    "MINIO_BUCKET": "tms-test",
    "SMTP_HOST": "localhost",
    "SMTP_USER": "mailer",
    "SMTP_PASSWORD": "mailer-secret",
    "SMTP_FROM_EMAIL": "noreply@example.com",
    "ADMIN_EMAIL": "admin@example.com",
    "ADMIN_PASSWORD": "Admin@123",
    "ADMIN_FIRST_NAME": "System",
    "ADMIN_LAST_NAME": "Admin",
    "LOGIN_RATE_LIMIT": "1000/minute",
    "ROLE_CACHE_BACKEND": "memory",
})

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tms_backend.core.constants import RoleName
from tms_backend.core.security import create_access_token, hash_password
from tms_backend.db.base import Base
from tms_backend.db.seeds.seed_admin import seed_admin
from tms_backend.db.seeds.seed_permissions import sync_permissions
from tms_backend.db.seeds.seed_roles import seed_roles
from tms_backend.db.session import get_db
from tms_backend.main import app
from tms_backend.models import Role, User
from tms_backend.services.cache_service import role_id_cache
from tms_backend.services.eid_service import eid_service

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "Passw0rd!"
# bcrypt is slow; hash the shared test password once.
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    role_id_cache.invalidate()
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        role_id_cache.invalidate()


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def seeded(db):
    """Permissions synced from the app routes, base roles and the administrator."""
    sync_permissions(db, app.routes)
    seed_roles(db)
    seed_admin(db)
    return db


def get_role(db, role_name: RoleName) -> Role:
    return db.query(Role).filter(Role.name == role_name.value).one()


def make_user(db, role_name: RoleName, email: str, **fields) -> User:
    role = get_role(db, role_name)
    user = User(
        eid=eid_service.generate(db, role.name),
        first_name=fields.pop("first_name", "Test"),
        last_name=fields.pop("last_name", role_name.value.title()),
        email=email,
        password_hash=TEST_PASSWORD_HASH,
        role_id=role.id,
        **fields,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.role_id, user.role.name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(seeded):
    return seeded.query(User).filter(User.email == "admin@example.com").one()


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def trainee(seeded):
    return make_user(seeded, RoleName.TRAINEE, "trainee@example.com")


@pytest.fixture
def trainee_headers(trainee):
    return auth_headers(trainee)
