"""Access gate: authentication failures are 401, authorization failures 403."""

import time
from datetime import timedelta

from jose import jwt

from tms_backend.core.constants import RoleName
from tms_backend.core.security import create_access_token
from tms_backend.models import Permission, Role

from conftest import auth_headers, make_user


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_missing_token_is_unauthenticated(client, seeded):
    resp = client.get("/api/profile")
    assert resp.status_code == 401
    body = resp.json()
    assert body["statusCode"] == 401
    assert body["error"] == "Unauthorized"


def test_malformed_authorization_header(client, seeded):
    resp = client.get("/api/profile", headers={"Authorization": "Token abc"})
    assert resp.status_code == 401


def test_garbage_token(client, seeded):
    resp = client.get("/api/profile", headers=_bearer("not-a-jwt"))
    assert resp.status_code == 401


def test_wrong_signature(client, trainee):
    now = int(time.time())
    token = jwt.encode(
        {"userId": trainee.id, "roleId": trainee.role_id, "roleName": "TRAINEE", "iat": now, "exp": now + 600},
        "some-other-secret",
        algorithm="HS256",
    )
    resp = client.get("/api/profile", headers=_bearer(token))
    assert resp.status_code == 401


def test_expired_token(client, trainee):
    token = create_access_token(
        trainee.id, trainee.role_id, "TRAINEE", expires_delta=timedelta(seconds=-5)
    )
    resp = client.get("/api/profile", headers=_bearer(token))
    assert resp.status_code == 401


def test_token_missing_claims(client, trainee):
    now = int(time.time())
    token = jwt.encode(
        {"userId": trainee.id, "iat": now, "exp": now + 600},
        "test-access-secret",
        algorithm="HS256",
    )
    resp = client.get("/api/profile", headers=_bearer(token))
    assert resp.status_code == 401


def test_granted_permission_allows(client, trainee, trainee_headers):
    resp = client.get("/api/profile", headers=trainee_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == trainee.id


def test_ungranted_endpoint_is_denied(client, trainee_headers):
    resp = client.get("/api/permissions", headers=trainee_headers)
    assert resp.status_code == 403
    assert resp.json()["statusCode"] == 403


def test_route_template_matches_any_path_parameter(client, seeded, trainee, trainee_headers):
    other = make_user(seeded, RoleName.TRAINER, "trainer@example.com")
    assert client.get(f"/api/users/{trainee.id}", headers=trainee_headers).status_code == 200
    assert client.get(f"/api/users/{other.id}", headers=trainee_headers).status_code == 200
    # Listing users is a different template and is not granted to trainees.
    assert client.get("/api/users", headers=trainee_headers).status_code == 403


def test_administrator_reaches_admin_endpoints(client, admin_headers):
    resp = client.get("/api/permissions", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["total"] > 0


def test_soft_deleted_permission_revokes_access_for_every_role(client, seeded, trainee_headers, admin_headers):
    permission = seeded.query(Permission).filter(Permission.name == "GET /api/profile").one()
    assert client.get("/api/profile", headers=trainee_headers).status_code == 200

    resp = client.delete(f"/api/permissions/{permission.id}", headers=admin_headers)
    assert resp.status_code == 200

    assert client.get("/api/profile", headers=trainee_headers).status_code == 403
    assert client.get("/api/profile", headers=admin_headers).status_code == 403


def test_unknown_role_is_forbidden_not_not_found(client, trainee):
    token = create_access_token(trainee.id, "00000000-0000-0000-0000-000000000000", "GHOST")
    resp = client.get("/api/profile", headers=_bearer(token))
    assert resp.status_code == 403


def test_disabled_role_is_forbidden(client, seeded, admin_headers):
    profile = seeded.query(Permission).filter(Permission.name == "GET /api/profile").one()
    resp = client.post(
        "/api/roles",
        json={"name": "OBSERVER", "permission_ids": [profile.id]},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    role_id = resp.json()["data"]["id"]
    observer = make_user(seeded, RoleName.TRAINEE, "observer@example.com")
    observer.role_id = role_id
    seeded.commit()
    seeded.refresh(observer)
    headers = auth_headers(observer)

    assert client.get("/api/profile", headers=headers).status_code == 200
    assert client.delete(f"/api/roles/{role_id}", headers=admin_headers).status_code == 200
    assert client.get("/api/profile", headers=headers).status_code == 403


def test_gate_stores_caller_on_request_state(client, trainee, trainee_headers):
    resp = client.get("/api/profile", headers=trainee_headers)
    assert resp.status_code == 200
    assert resp.headers["X-Request-Id"]


def test_inactive_role_flag_is_forbidden(client, seeded, trainee, trainee_headers):
    role = seeded.query(Role).filter(Role.id == trainee.role_id).one()
    role.is_active = False
    seeded.commit()
    assert client.get("/api/profile", headers=trainee_headers).status_code == 403
