"""Permission groups API and seed."""

from tms_backend.db.seeds.seed_permission_groups import seed_permission_groups
from tms_backend.models import Permission, PermissionGroup


def _permission_id(db, name):
    return db.query(Permission).filter(Permission.name == name).one().id


def _create(client, headers, **overrides):
    body = {"group_name": "User & Access Management", "name": "View All Roles", "code": "PERM-06"}
    body.update(overrides)
    return client.post("/api/permission-groups", json=body, headers=headers)


def test_create_and_get_group(client, seeded, admin_headers):
    resp = _create(client, admin_headers)
    assert resp.status_code == 201, resp.text
    created = resp.json()["data"]
    assert created["code"] == "PERM-06"
    assert created["permission_count"] == 0

    fetched = client.get(f"/api/permission-groups/{created['id']}", headers=admin_headers)
    assert fetched.status_code == 200
    assert fetched.json()["data"]["name"] == "View All Roles"


def test_duplicate_code_is_a_field_error(client, seeded, admin_headers):
    _create(client, admin_headers)
    resp = _create(client, admin_headers, name="Other")
    assert resp.status_code == 422
    assert resp.json()["errors"][0]["path"] == "code"


def test_list_collects_groups_under_headings_in_code_order(client, seeded, admin_headers):
    _create(client, admin_headers, group_name="Reporting & Analytics", name="View Reports", code="PERM-55")
    _create(client, admin_headers, group_name="User & Access Management", name="Create User", code="PERM-02")
    _create(client, admin_headers, group_name="User & Access Management", name="View Users", code="PERM-01")

    data = client.get("/api/permission-groups", headers=admin_headers).json()["data"]
    assert [c["group_name"] for c in data] == ["User & Access Management", "Reporting & Analytics"]
    assert [g["code"] for g in data[0]["permission_groups"]] == ["PERM-01", "PERM-02"]


def test_assign_replaces_permissions(client, seeded, admin_headers):
    group = _create(client, admin_headers).json()["data"]
    read_one = _permission_id(seeded, "GET /api/roles/{role_id}")
    read_all = _permission_id(seeded, "GET /api/roles")
    url = f"/api/permission-groups/{group['id']}/permissions"

    resp = client.post(url, json={"permission_ids": [read_one, read_all, read_all]}, headers=admin_headers)
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["permission_count"] == 2
    assert [p["name"] for p in data["permissions"]] == ["GET /api/roles", "GET /api/roles/{role_id}"]

    cleared = client.post(url, json={"permission_ids": []}, headers=admin_headers).json()["data"]
    assert cleared["permission_count"] == 0


def test_assign_unknown_permission_is_rejected(client, seeded, admin_headers):
    group = _create(client, admin_headers).json()["data"]
    resp = client.post(
        f"/api/permission-groups/{group['id']}/permissions",
        json={"permission_ids": ["missing"]},
        headers=admin_headers,
    )
    assert resp.status_code == 422
    assert resp.json()["errors"][0]["path"] == "permission_ids"


def test_soft_deleted_permission_drops_out_of_group(client, seeded, admin_headers):
    group = _create(client, admin_headers).json()["data"]
    permission = client.post(
        "/api/permissions",
        json={"name": "GET /api/widgets", "path": "/api/widgets", "method": "GET", "module": "WIDGETS"},
        headers=admin_headers,
    ).json()["data"]
    client.post(
        f"/api/permission-groups/{group['id']}/permissions",
        json={"permission_ids": [permission["id"]]},
        headers=admin_headers,
    )
    client.delete(f"/api/permissions/{permission['id']}", headers=admin_headers)

    detail = client.get(f"/api/permission-groups/{group['id']}", headers=admin_headers).json()["data"]
    assert detail["permission_count"] == 0
    listed = client.get("/api/permission-groups", headers=admin_headers).json()["data"]
    assert listed[0]["permission_groups"][0]["permission_count"] == 0


def test_update_and_delete(client, seeded, admin_headers):
    group = _create(client, admin_headers).json()["data"]
    read_all = _permission_id(seeded, "GET /api/roles")
    client.post(
        f"/api/permission-groups/{group['id']}/permissions",
        json={"permission_ids": [read_all]},
        headers=admin_headers,
    )

    resp = client.patch(
        f"/api/permission-groups/{group['id']}", json={"name": "Browse Roles"}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["name"] == "Browse Roles"
    assert resp.json()["data"]["code"] == "PERM-06"

    assert client.delete(f"/api/permission-groups/{group['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/permission-groups/{group['id']}", headers=admin_headers).status_code == 404
    seeded.expire_all()
    assert seeded.get(Permission, read_all) is not None


def test_unknown_group_is_not_found(client, seeded, admin_headers):
    resp = client.patch("/api/permission-groups/missing", json={"name": "x"}, headers=admin_headers)
    assert resp.status_code == 404


def test_trainee_cannot_manage_groups(client, seeded, trainee_headers):
    assert client.get("/api/permission-groups", headers=trainee_headers).status_code == 403
    assert _create(client, trainee_headers).status_code == 403


def test_seed_links_synced_permissions_and_is_repeatable(seeded):
    assert seed_permission_groups(seeded) > 0
    assert seed_permission_groups(seeded) == 0

    group = seeded.query(PermissionGroup).filter(PermissionGroup.code == "PERM-01").one()
    assert group.group_name == "User & Access Management"
    assert {p.name for p in group.permissions} == {
        "GET /api/users", "GET /api/users/trainees", "GET /api/users/{user_id}",
    }
