"""Role/permission resolution against literal route templates."""

from tms_backend.core.constants import HTTPMethod, RoleName
from tms_backend.models import Permission, Role
from tms_backend.services.lifecycle import lifecycle_service
from tms_backend.services.permission_resolver import permission_resolver

from conftest import get_role


def _role_with(db, name, *permissions):
    role = Role(name=name, is_active=True)
    role.permissions = list(permissions)
    db.add(role)
    db.commit()
    return role


def _permission(db, path, method=HTTPMethod.GET):
    permission = Permission(
        name=f"{method.value} {path}", path=path, method=method, module="TEST", is_active=True
    )
    db.add(permission)
    db.commit()
    return permission


def test_resolve_returns_only_matching_permission(db):
    read = _permission(db, "/api/things/{thing_id}")
    write = _permission(db, "/api/things/{thing_id}", HTTPMethod.PUT)
    role = _role_with(db, "READER", read, write)

    resolved = permission_resolver.resolve(db, role.id, "/api/things/{thing_id}", "GET")

    assert resolved is not None
    assert resolved.name == "READER"
    assert [p.id for p in resolved.permissions] == [read.id]
    assert resolved.permissions[0].method == "GET"


def test_resolve_does_not_narrow_the_orm_collection(db):
    read = _permission(db, "/api/things")
    write = _permission(db, "/api/things", HTTPMethod.POST)
    role = _role_with(db, "EDITOR", read, write)

    permission_resolver.resolve(db, role.id, "/api/things", "GET")
    db.expire_all()

    assert {p.id for p in db.get(Role, role.id).permissions} == {read.id, write.id}


def test_no_match_means_empty_permissions(db):
    role = _role_with(db, "EMPTY", _permission(db, "/api/things"))
    resolved = permission_resolver.resolve(db, role.id, "/api/other", "GET")
    assert resolved is not None
    assert resolved.permissions == ()
    assert not permission_resolver.can_access(db, role.id, "/api/other", "GET")


def test_concrete_path_does_not_match_template(db):
    role = _role_with(db, "STRICT", _permission(db, "/api/things/{thing_id}"))
    assert not permission_resolver.can_access(db, role.id, "/api/things/42", "GET")
    assert permission_resolver.can_access(db, role.id, "/api/things/{thing_id}", "get")


def test_soft_deleted_permission_is_ignored(db):
    permission = _permission(db, "/api/things")
    role = _role_with(db, "GONE", permission)
    lifecycle_service.disable(db, permission, actor_id="tester")
    assert not permission_resolver.can_access(db, role.id, "/api/things", "GET")


def test_deleted_or_inactive_role_resolves_to_none(db):
    permission = _permission(db, "/api/things")
    deleted = _role_with(db, "DELETED", permission)
    inactive = _role_with(db, "INACTIVE", permission)
    lifecycle_service.disable(db, deleted, actor_id="tester")
    inactive.is_active = False
    db.commit()

    assert permission_resolver.resolve(db, deleted.id, "/api/things", "GET") is None
    assert permission_resolver.resolve(db, inactive.id, "/api/things", "GET") is None
    assert permission_resolver.resolve(db, "missing", "/api/things", "GET") is None


def test_unknown_http_method_matches_nothing(db):
    role = _role_with(db, "ODD", _permission(db, "/api/things"))
    resolved = permission_resolver.resolve(db, role.id, "/api/things", "TRACE")
    assert resolved is not None and not resolved.has_permissions


def test_seeded_trainee_defaults(seeded):
    trainee_role = get_role(seeded, RoleName.TRAINEE)
    assert permission_resolver.can_access(seeded, trainee_role.id, "/api/profile", "GET")
    assert not permission_resolver.can_access(seeded, trainee_role.id, "/api/roles", "POST")
