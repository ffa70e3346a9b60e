"""Permissions API."""

from unittest.mock import patch

import pytest

from tms_backend.core.constants import HTTPMethod
from tms_backend.core.exceptions import ConflictError
from tms_backend.models import Permission
from tms_backend.schemas.schemas import PermissionCreate
from tms_backend.services.permission_service import PermissionService, permission_service


def _payload(**overrides):
    body = {
        "name": "GET /api/widgets",
        "path": "/api/widgets",
        "method": "GET",
        "module": "WIDGETS",
    }
    body.update(overrides)
    return body


def test_create_and_get_permission(client, seeded, admin_headers):
    resp = client.post("/api/permissions", json=_payload(), headers=admin_headers)
    assert resp.status_code == 201
    created = resp.json()["data"]
    assert created["method"] == "GET"
    assert created["is_active"] is True

    fetched = client.get(f"/api/permissions/{created['id']}", headers=admin_headers)
    assert fetched.json()["data"]["path"] == "/api/widgets"


def test_duplicate_endpoint_reports_path_and_method(client, seeded, admin_headers):
    client.post("/api/permissions", json=_payload(), headers=admin_headers)
    resp = client.post("/api/permissions", json=_payload(name="Another"), headers=admin_headers)
    assert resp.status_code == 422
    paths = {e["path"] for e in resp.json()["errors"]}
    assert paths == {"path", "method"}


def test_same_path_other_method_is_allowed(client, seeded, admin_headers):
    client.post("/api/permissions", json=_payload(), headers=admin_headers)
    resp = client.post("/api/permissions", json=_payload(method="POST"), headers=admin_headers)
    assert resp.status_code == 201


def test_soft_deleted_endpoint_can_be_recreated_but_not_re_enabled(client, seeded, admin_headers):
    first = client.post("/api/permissions", json=_payload(), headers=admin_headers).json()["data"]
    assert client.delete(f"/api/permissions/{first['id']}", headers=admin_headers).status_code == 200

    second = client.post("/api/permissions", json=_payload(), headers=admin_headers)
    assert second.status_code == 201

    resp = client.patch(f"/api/permissions/{first['id']}/enable", headers=admin_headers)
    assert resp.status_code == 422


def test_update_into_existing_endpoint_conflicts(client, seeded, admin_headers):
    client.post("/api/permissions", json=_payload(), headers=admin_headers)
    other = client.post(
        "/api/permissions", json=_payload(path="/api/gadgets"), headers=admin_headers
    ).json()["data"]
    resp = client.put(
        f"/api/permissions/{other['id']}", json={"path": "/api/widgets"}, headers=admin_headers
    )
    assert resp.status_code == 422


def test_path_must_be_absolute(client, seeded, admin_headers):
    resp = client.post("/api/permissions", json=_payload(path="api/widgets"), headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["errors"][0]["path"] == "path"


def test_filters_by_module_and_method(client, seeded, admin_headers):
    resp = client.get(
        "/api/permissions", params={"module": "ROLES", "method": "DELETE"}, headers=admin_headers
    )
    items = resp.json()["data"]["items"]
    assert items
    assert all(p["module"] == "ROLES" and p["method"] == "DELETE" for p in items)


def test_pagination_bounds(client, seeded, admin_headers):
    resp = client.get("/api/permissions", params={"page_size": 5, "page": 2}, headers=admin_headers)
    data = resp.json()["data"]
    assert data["page"] == 2
    assert len(data["items"]) == 5
    assert client.get("/api/permissions", params={"page": 0}, headers=admin_headers).status_code == 422


def test_synced_permissions_use_route_templates(seeded):
    names = {p.name for p in seeded.query(Permission).all()}
    assert "GET /api/roles/{role_id}" in names
    assert "PATCH /api/users/{user_id}/enable" in names
    assert not any(p.path == "/health" for p in seeded.query(Permission).all())


def test_database_rejects_second_live_endpoint_when_precheck_is_passed(seeded, admin):
    data = PermissionCreate(**_payload())
    with patch.object(PermissionService, "_ensure_endpoint_free"):
        permission_service.create_permission(seeded, data, admin.id)
        with pytest.raises(ConflictError) as exc:
            permission_service.create_permission(seeded, data, admin.id)
    assert exc.value.status_code == 422
    assert {e["path"] for e in exc.value.errors} == {"path", "method"}
    live = seeded.query(Permission).filter(
        Permission.path == "/api/widgets", Permission.deleted_at.is_(None)
    ).count()
    assert live == 1


def test_active_key_follows_lifecycle(client, seeded, admin_headers):
    created = client.post("/api/permissions", json=_payload(), headers=admin_headers).json()["data"]
    permission = seeded.get(Permission, created["id"])
    assert permission.active_key == Permission.endpoint_key("/api/widgets", HTTPMethod.GET)

    client.delete(f"/api/permissions/{created['id']}", headers=admin_headers)
    seeded.expire_all()
    assert seeded.get(Permission, created["id"]).active_key is None

    resp = client.patch(f"/api/permissions/{created['id']}/enable", headers=admin_headers)
    assert resp.status_code == 200
    seeded.expire_all()
    assert seeded.get(Permission, created["id"]).active_key == "GET /api/widgets"
