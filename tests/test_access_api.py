from sqlalchemy import select

from app.hotelport.core.permissions import ModuleType
from app.hotelport.db.models import AuditEvent
from tests.factories import (
    auth_headers,
    create_access_record,
    create_role,
    create_super_admin_role,
    create_user,
    login,
    perm,
)


def _partial_user(db_session, email, property_ids=("P1",)):
    role = create_role(
        db_session,
        permissions={
            ModuleType.PORTFOLIO: perm("view", "all"),
            ModuleType.PROPERTY: perm("update", "partial"),
            ModuleType.AUDIT: perm("view", "partial"),
        },
    )
    user = create_user(db_session, role, email=email, with_password=True)
    create_access_record(db_session, user, property_ids=property_ids)
    return user


def test_login_rejects_bad_password(client, db_session):
    _partial_user(db_session, "manager@example.com")

    response = client.post("/auth/login", json={"email": "manager@example.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_missing_or_invalid_token(client):
    assert client.get("/me/permissions").status_code == 401

    response = client.get("/me/permissions", headers=auth_headers("not-a-jwt"))
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


def test_my_permissions_summary(client, db_session):
    user = _partial_user(db_session, "manager@example.com", property_ids=("P1", "P2"))
    headers = auth_headers(login(client, user.email))

    response = client.get("/me/permissions", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["is_super_admin"] is False
    modules = {item["module"]: item for item in body["modules"]}
    assert modules["portfolio"]["accessible_ids"] == "all"
    assert modules["property"]["accessible_ids"] == ["P1", "P2"]
    assert modules["property"]["allowed_actions"] == ["create", "read", "update"]
    assert modules["audit"]["effective_access_level"] == "none"
    assert modules["audit"]["accessible_ids"] == []
    assert modules["user"]["permission"] is None
    assert modules["user"]["description"] == "No permission"


def test_route_guard_distinguishes_scope_from_level(client, db_session):
    user = _partial_user(db_session, "manager@example.com")
    headers = auth_headers(login(client, user.email))

    allowed = client.get("/properties/P1/access-check", headers=headers)
    assert allowed.status_code == 200
    assert allowed.json()["allowed"] is True

    outside = client.get("/properties/P2/access-check", headers=headers)
    assert outside.status_code == 403
    assert outside.json()["code"] == "RESOURCE_NOT_ACCESSIBLE"

    no_role = create_role(db_session, permissions={ModuleType.PORTFOLIO: perm("view", "all")})
    stranger = create_user(db_session, no_role, email="stranger@example.com", with_password=True)
    denied = client.get("/properties/P1/access-check", headers=auth_headers(login(client, stranger.email)))
    assert denied.status_code == 403
    assert denied.json()["code"] == "PERMISSION_DENIED"
    assert denied.json()["message"] == "No permission found for module: property"


def test_admin_manages_user_access(client, db_session):
    admin = create_user(db_session, create_super_admin_role(db_session), email="admin@example.com", with_password=True)
    target = _partial_user(db_session, "manager@example.com")
    headers = auth_headers(login(client, admin.email))

    added = client.post(
        f"/users/{target.id}/access/add", headers=headers, json={"module": "property", "resource_ids": ["P2", "P1"]}
    )
    assert added.status_code == 200
    assert added.json()["property_ids"] == ["P1", "P2"]

    revoked = client.post(
        f"/users/{target.id}/access/revoke", headers=headers, json={"module": "property", "resource_ids": ["P1"]}
    )
    assert revoked.json()["property_ids"] == ["P2"]

    replaced = client.put(f"/users/{target.id}/access", headers=headers, json={"property_ids": ["P7"]})
    assert replaced.json()["property_ids"] == ["P7"]

    cleared = client.delete(f"/users/{target.id}/access", headers=headers)
    assert cleared.status_code == 200
    assert cleared.json()["property_ids"] == []

    not_partial = client.post(
        f"/users/{target.id}/access/add", headers=headers, json={"module": "portfolio", "resource_ids": ["PF1"]}
    )
    assert not_partial.status_code == 400
    assert not_partial.json()["code"] == "PARTIAL_ACCESS_NOT_CONFIGURED"

    unsupported = client.post(
        f"/users/{target.id}/access/add", headers=headers, json={"module": "audit", "resource_ids": ["A1"]}
    )
    assert unsupported.status_code == 422

    own = client.post(
        f"/users/{admin.id}/access/add", headers=headers, json={"module": "property", "resource_ids": ["P1"]}
    )
    assert own.status_code == 403
    assert own.json()["code"] == "SELF_MODIFICATION_FORBIDDEN"


def test_user_access_routes_require_user_update(client, db_session):
    manager = _partial_user(db_session, "manager@example.com")
    other = _partial_user(db_session, "other@example.com")
    headers = auth_headers(login(client, manager.email))

    response = client.post(
        f"/users/{other.id}/access/add", headers=headers, json={"module": "property", "resource_ids": ["P9"]}
    )

    assert response.status_code == 403
    assert response.json()["code"] == "PERMISSION_DENIED"


def test_role_admin_gets_configuration_warnings(client, db_session):
    admin = create_user(db_session, create_super_admin_role(db_session), email="admin@example.com", with_password=True)
    headers = auth_headers(login(client, admin.email))

    created = client.post(
        "/roles",
        headers=headers,
        json={
            "name": "Auditor",
            "permissions": {
                "audit": {"permission_level": "view", "access_level": "partial"},
                "property": {"permission_level": "view", "access_level": "all"},
            },
        },
    )
    assert created.status_code == 201
    body = created.json()
    assert body["permissions"]["audit"] == {"permission_level": "view", "access_level": "partial"}
    assert body["permissions"]["user"] is None
    assert any("does not support partial access" in warning for warning in body["warnings"])

    duplicate = client.post("/roles", headers=headers, json={"name": "auditor"})
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "ROLE_NAME_TAKEN"

    updated = client.patch(
        f"/roles/{body['id']}",
        headers=headers,
        json={"permissions": {"audit": {"permission_level": "view", "access_level": "all"}}},
    )
    assert updated.status_code == 200
    assert updated.json()["warnings"] == []
    assert updated.json()["permissions"]["property"] == {"permission_level": "view", "access_level": "all"}


def test_access_mutation_audit_event_carries_trace_id(client, db_session):
    admin = create_user(db_session, create_super_admin_role(db_session), email="admin@example.com", with_password=True)
    target = _partial_user(db_session, "manager@example.com")
    headers = {**auth_headers(login(client, admin.email)), "X-Trace-ID": "trace-access-1"}

    response = client.post(
        f"/users/{target.id}/access/add", headers=headers, json={"module": "property", "resource_ids": ["P2"]}
    )
    assert response.status_code == 200

    event = db_session.execute(select(AuditEvent).where(AuditEvent.action == "access.add")).scalars().one()
    assert event.trace_id == "trace-access-1"


def test_clear_access_of_full_access_user_is_refused(client, db_session):
    admin = create_user(db_session, create_super_admin_role(db_session), email="admin@example.com", with_password=True)
    role = create_role(db_session, permissions={ModuleType.PROPERTY: perm("view", "all")})
    target = create_user(db_session, role, email="full@example.com")
    headers = auth_headers(login(client, admin.email))

    response = client.delete(f"/users/{target.id}/access", headers=headers)

    assert response.status_code == 400
    assert response.json()["code"] == "PARTIAL_ACCESS_NOT_CONFIGURED"
