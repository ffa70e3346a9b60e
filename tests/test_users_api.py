"""Users API: creation with generated EIDs, bulk creation, disable/enable."""

import pytest

from tms_backend.core.access_gate import AccessContext, AccessTokenPayload
from tms_backend.core.constants import RoleName, UserStatus
from tms_backend.core.exceptions import ForbiddenError
from tms_backend.models import Permission, RefreshToken, User
from tms_backend.schemas.schemas import UserCreate
from tms_backend.services.permission_resolver import RoleWithPermissions
from tms_backend.services.user_service import user_service

from conftest import TEST_PASSWORD_HASH, auth_headers, get_role, make_user


def _user_payload(db, role_name, email, **extra):
    body = {
        "first_name": "Linh",
        "last_name": "Tran",
        "email": email,
        "role_id": get_role(db, role_name).id,
    }
    body.update(extra)
    return body


def test_create_user_generates_eid_from_role(client, seeded, admin_headers):
    first = client.post(
        "/api/users", json=_user_payload(seeded, RoleName.TRAINER, "t1@example.com"), headers=admin_headers
    )
    second = client.post(
        "/api/users", json=_user_payload(seeded, RoleName.TRAINER, "t2@example.com"), headers=admin_headers
    )
    assert first.status_code == 201, first.text
    assert first.json()["data"]["eid"] == "TR000001"
    assert second.json()["data"]["eid"] == "TR000002"
    assert first.json()["data"]["role"]["name"] == "TRAINER"
    assert first.json()["data"]["status"] == "ACTIVE"


def test_new_user_can_sign_in_with_initial_password(client, seeded, admin_headers):
    created = client.post(
        "/api/users", json=_user_payload(seeded, RoleName.TRAINEE, "new@example.com"), headers=admin_headers
    ).json()["data"]
    resp = client.post(
        "/api/auth/login",
        json={"email": "new@example.com", "password": f"{created['eid']}test-password-secret"},
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["eid"] == created["eid"]


def test_duplicate_email_is_a_field_error(client, seeded, admin_headers):
    payload = _user_payload(seeded, RoleName.TRAINEE, "admin@example.com")
    resp = client.post("/api/users", json=payload, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["errors"] == [{"path": "email", "message": "Email already exists"}]


def test_duplicate_eid_is_reported_on_eid(client, seeded, admin_headers):
    trainer_role = get_role(seeded, RoleName.TRAINER)
    for eid in ("TR000001", "TRXYZ"):
        seeded.add(User(
            eid=eid,
            first_name="Legacy",
            last_name="Trainer",
            email=f"{eid.lower()}@example.com",
            password_hash=TEST_PASSWORD_HASH,
            role_id=trainer_role.id,
        ))
    seeded.commit()

    # "TRXYZ" sorts last and does not parse, so numbering restarts on the taken TR000001.
    resp = client.post(
        "/api/users", json=_user_payload(seeded, RoleName.TRAINER, "t1@example.com"), headers=admin_headers
    )
    assert resp.status_code == 422
    assert resp.json()["errors"] == [{"path": "eid", "message": "Employee id already exists"}]


def test_unknown_role_is_a_field_error(client, seeded, admin_headers):
    payload = _user_payload(seeded, RoleName.TRAINEE, "x@example.com", role_id="missing")
    resp = client.post("/api/users", json=payload, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["errors"][0]["path"] == "role_id"


def test_invalid_email_uses_validation_envelope(client, seeded, admin_headers):
    payload = _user_payload(seeded, RoleName.TRAINEE, "not-an-email")
    resp = client.post("/api/users", json=payload, headers=admin_headers)
    assert resp.status_code == 422
    body = resp.json()
    assert body["statusCode"] == 422
    assert body["message"] == "Validation failed"
    assert body["errors"][0]["path"] == "email"


def test_only_admins_create_administrators(seeded):
    head = make_user(seeded, RoleName.DEPARTMENT_HEAD, "head@example.com")
    ctx = AccessContext(
        user=AccessTokenPayload(
            userId=head.id, roleId=head.role_id, roleName="DEPARTMENT_HEAD", iat=0, exp=0
        ),
        role=RoleWithPermissions(id=head.role_id, name="DEPARTMENT_HEAD"),
    )
    data = UserCreate(
        first_name="Evil",
        last_name="Admin",
        email="evil@example.com",
        role_id=get_role(seeded, RoleName.ADMINISTRATOR).id,
    )
    with pytest.raises(ForbiddenError):
        user_service.create_user(seeded, data, ctx)


def test_bulk_create_reserves_one_range_per_role(client, seeded, admin_headers):
    users = [
        _user_payload(seeded, RoleName.TRAINEE, "a@example.com"),
        _user_payload(seeded, RoleName.TRAINER, "b@example.com"),
        _user_payload(seeded, RoleName.TRAINEE, "c@example.com"),
        _user_payload(seeded, RoleName.TRAINEE, "a@example.com"),
        _user_payload(seeded, RoleName.TRAINEE, "admin@example.com"),
    ]
    resp = client.post("/api/users/bulk", json={"users": users}, headers=admin_headers)
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]

    assert {u["email"]: u["eid"] for u in data["created"]} == {
        "a@example.com": "TE000001",
        "c@example.com": "TE000002",
        "b@example.com": "TR000001",
    }
    assert [f["index"] for f in data["failed"]] == [3, 4]


def test_list_users_and_trainees(client, seeded, admin_headers, trainee):
    make_user(seeded, RoleName.TRAINER, "trainer@example.com")
    all_users = client.get("/api/users", headers=admin_headers).json()["data"]
    assert all_users["total"] == 3

    trainees = client.get("/api/users/trainees", headers=admin_headers).json()["data"]
    assert [u["id"] for u in trainees["items"]] == [trainee.id]

    found = client.get("/api/users", params={"search": "trainer@"}, headers=admin_headers).json()["data"]
    assert found["total"] == 1


def test_update_role_regenerates_eid(client, seeded, admin_headers, trainee):
    trainer_role = get_role(seeded, RoleName.TRAINER)
    resp = client.put(f"/api/users/{trainee.id}", json={"role_id": trainer_role.id}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["eid"] == "TR000001"


def test_disable_user_revokes_refresh_tokens(client, seeded, admin_headers, trainee):
    login = client.post("/api/auth/login", json={"email": trainee.email, "password": "Passw0rd!"})
    refresh_token = login.json()["refresh_token"]

    resp = client.delete(f"/api/users/{trainee.id}", headers=admin_headers)
    assert resp.status_code == 200

    seeded.expire_all()
    user = seeded.get(User, trainee.id)
    assert user.status == UserStatus.DISABLED
    assert user.deleted_at is not None
    assert seeded.query(RefreshToken).filter(RefreshToken.revoked_at.is_(None)).count() == 0
    assert client.post("/api/auth/refresh", json={"refresh_token": refresh_token}).status_code == 401

    enabled = client.patch(f"/api/users/{trainee.id}/enable", headers=admin_headers)
    assert enabled.status_code == 200
    assert enabled.json()["data"]["status"] == "ACTIVE"


def test_cannot_disable_yourself(client, admin, admin_headers):
    resp = client.delete(f"/api/users/{admin.id}", headers=admin_headers)
    assert resp.status_code == 400


def test_hard_delete_requires_administrator(client, seeded, trainee):
    head = make_user(seeded, RoleName.DEPARTMENT_HEAD, "head@example.com")
    role = get_role(seeded, RoleName.DEPARTMENT_HEAD)
    role.permissions.append(
        seeded.query(Permission).filter(Permission.name == "DELETE /api/users/{user_id}").one()
    )
    seeded.commit()
    resp = client.delete(f"/api/users/{trainee.id}", params={"hard": "true"}, headers=auth_headers(head))
    assert resp.status_code == 403
