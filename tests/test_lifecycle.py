"""Soft delete / enable / hard delete and the shared list filters."""

import pytest

from tms_backend.core.constants import RoleName, UserStatus
from tms_backend.core.exceptions import AlreadyActiveError, AlreadyDisabledError
from tms_backend.db.filters import build_list_filters
from tms_backend.models import Department, Role, User
from tms_backend.repositories.role_repository import RoleRepository
from tms_backend.services.lifecycle import lifecycle_service

from conftest import make_user


def _role(db, name="CUSTOM"):
    role = Role(name=name, is_active=True)
    db.add(role)
    db.commit()
    return role


def test_disable_sets_deleted_columns_and_flag(db):
    role = _role(db)
    lifecycle_service.disable(db, role, actor_id="actor-1")
    assert role.deleted_at is not None
    assert role.deleted_by_id == "actor-1"
    assert role.is_active is False


def test_disable_twice_is_rejected(db):
    role = _role(db)
    lifecycle_service.disable(db, role, actor_id="actor-1")
    with pytest.raises(AlreadyDisabledError) as exc:
        lifecycle_service.disable(db, role, actor_id="actor-1")
    assert exc.value.status_code == 400


def test_enable_restores_and_clears_deleted_by(db):
    role = _role(db)
    lifecycle_service.disable(db, role, actor_id="actor-1")
    lifecycle_service.enable(db, role, actor_id="actor-2")
    assert role.deleted_at is None
    assert role.deleted_by_id is None
    assert role.updated_by_id == "actor-2"
    assert role.is_active is True


def test_enable_active_entity_is_rejected(db):
    with pytest.raises(AlreadyActiveError):
        lifecycle_service.enable(db, _role(db), actor_id="actor-1")


def test_user_status_follows_lifecycle(seeded):
    user = make_user(seeded, RoleName.TRAINER, "trainer@example.com")
    lifecycle_service.disable(seeded, user, actor_id="actor-1")
    assert user.status == UserStatus.DISABLED
    lifecycle_service.enable(seeded, user, actor_id="actor-1")
    assert user.status == UserStatus.ACTIVE


def test_hard_delete_removes_row(db):
    role = _role(db)
    role_id = role.id
    lifecycle_service.hard_delete(db, role)
    db.expire_all()
    assert db.get(Role, role_id) is None


def test_list_filters_exclude_deleted_by_default(db):
    filters = build_list_filters(Role)
    assert len(filters) == 1
    assert "deleted_at IS NULL" in str(filters[0])


def test_list_filters_include_deleted_adds_nothing(db):
    assert build_list_filters(Role, include_deleted=True) == []


def test_list_filters_keep_base_and_extension(db):
    base = [Role.name == "X"]
    seen = []

    def extend(include_deleted):
        seen.append(include_deleted)
        return [Role.is_active.is_(True)]

    filters = build_list_filters(Department, base_filters=base, extend=extend)
    assert len(filters) == 3
    assert seen == [False]


def test_repository_list_respects_soft_delete(db):
    kept = _role(db, "KEPT")
    gone = _role(db, "GONE")
    lifecycle_service.disable(db, gone, actor_id="actor-1")
    repo = RoleRepository(db)

    assert [r.id for r in repo.list()] == [kept.id]
    assert {r.id for r in repo.list(include_deleted=True)} == {kept.id, gone.id}
    assert repo.get(gone.id) is None
    assert repo.get(gone.id, include_deleted=True) is not None
    assert repo.count() == 1


def test_user_disable_keeps_row_for_history(seeded):
    user = make_user(seeded, RoleName.TRAINEE, "history@example.com")
    lifecycle_service.disable(seeded, user, actor_id="actor-1")
    seeded.expire_all()
    assert seeded.get(User, user.id) is not None
