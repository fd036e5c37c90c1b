from app.hotelport.core.permissions import ModuleType
from tests.factories import (
    auth_headers,
    create_access_record,
    create_audit,
    create_portfolio,
    create_property,
    create_role,
    create_super_admin_role,
    create_user,
    login,
    perm,
)


def _setup(client, db_session):
    admin = create_user(db_session, create_super_admin_role(db_session), email="admin@example.com", with_password=True)
    staff_role = create_role(db_session, permissions={ModuleType.PROPERTY: perm("update", "all")})
    staff = create_user(db_session, staff_role, email="staff@example.com", with_password=True)
    source = create_portfolio(db_session, name="Source")
    target = create_portfolio(db_session, name="Target")
    prop = create_property(db_session, source, name="Seaside")
    return {
        "admin": auth_headers(login(client, admin.email)),
        "staff": auth_headers(login(client, staff.email)),
        "source": source,
        "target": target,
        "property": prop,
    }


def _create_transfer(client, ctx):
    return client.post(
        "/pending-actions",
        headers=ctx["staff"],
        json={
            "resource_type": "property",
            "action_type": "PROPERTY_TRANSFER",
            "property_id": str(ctx["property"].id),
            "transfer_data": {"new_portfolio_id": str(ctx["target"].id)},
            "reason": "consolidation",
        },
    )


def test_create_list_and_approve(client, db_session):
    ctx = _setup(client, db_session)

    created = _create_transfer(client, ctx)
    assert created.status_code == 201
    action_id = created.json()["id"]

    listing = client.get("/pending-actions", headers=ctx["admin"], params={"status": "PENDING", "limit": 5})
    assert listing.status_code == 200
    body = listing.json()
    assert body["total"] == 1
    assert body["limit"] == 5
    assert body["total_pages"] == 1
    assert body["data"][0]["current_portfolio"]["name"] == "Source"

    approved = client.post(f"/pending-actions/{action_id}/approve", headers=ctx["admin"])
    assert approved.status_code == 200
    payload = approved.json()
    assert payload["status"] == "APPROVED"
    assert payload["transfer_data"]["portfolio_from"]["name"] == "Source"
    assert payload["transfer_data"]["portfolio_to"]["name"] == "Target"

    again = client.post(f"/pending-actions/{action_id}/approve", headers=ctx["admin"])
    assert again.status_code == 400
    assert again.json()["code"] == "INVALID_STATUS_TRANSITION"
    assert again.json()["message"] == "Cannot approve action with status: APPROVED"


def test_reject_flow(client, db_session):
    ctx = _setup(client, db_session)
    action_id = _create_transfer(client, ctx).json()["id"]

    missing = client.post(f"/pending-actions/{action_id}/reject", headers=ctx["admin"], json={})
    assert missing.status_code == 400
    assert missing.json()["code"] == "REJECTION_REASON_REQUIRED"

    rejected = client.post(
        f"/pending-actions/{action_id}/reject", headers=ctx["admin"], json={"rejection_reason": "not now"}
    )
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "REJECTED"

    detail = client.get(f"/pending-actions/{action_id}", headers=ctx["admin"])
    assert detail.json()["rejection_reason"] == "not now"


def test_only_super_admin_can_list_or_decide(client, db_session):
    ctx = _setup(client, db_session)
    action_id = _create_transfer(client, ctx).json()["id"]

    for response in (
        client.get("/pending-actions", headers=ctx["staff"]),
        client.get(f"/pending-actions/{action_id}", headers=ctx["staff"]),
        client.post(f"/pending-actions/{action_id}/approve", headers=ctx["staff"]),
    ):
        assert response.status_code == 403
        assert response.json()["code"] == "SUPER_ADMIN_REQUIRED"


def test_retired_delete_and_validation_errors(client, db_session):
    ctx = _setup(client, db_session)

    retired = client.post(
        "/pending-actions",
        headers=ctx["admin"],
        json={"resource_type": "property", "action_type": "PROPERTY_DELETE", "property_id": str(ctx["property"].id)},
    )
    assert retired.status_code == 400
    assert retired.json()["code"] == "ACTION_TYPE_RETIRED"

    invalid = client.post(
        "/pending-actions",
        headers=ctx["staff"],
        json={"resource_type": "property", "action_type": "PROPERTY_MERGE"},
    )
    assert invalid.status_code == 422
    assert invalid.json()["code"] == "VALIDATION_ERROR"

    bad_filter = client.get("/pending-actions", headers=ctx["admin"], params={"property_id": "not-a-uuid"})
    assert bad_filter.status_code == 422

    unknown = client.get("/pending-actions/not-a-uuid", headers=ctx["admin"])
    assert unknown.status_code == 404
    assert unknown.json()["code"] == "PENDING_ACTION_NOT_FOUND"


def test_audit_amount_request_route(client, db_session):
    ctx = _setup(client, db_session)
    audit = create_audit(db_session, ctx["property"])
    external_role = create_role(
        db_session,
        is_external=True,
        permissions={ModuleType.PROPERTY: perm("view", "partial"), ModuleType.AUDIT: perm("update", "all")},
    )
    external = create_user(db_session, external_role, email="owner@example.com", with_password=True)
    create_access_record(db_session, external, property_ids=[str(ctx["property"].id)])
    headers = auth_headers(login(client, external.email))

    created = client.post(
        f"/audits/{audit.id}/amount-confirmed-requests",
        headers=headers,
        json={"amount_confirmed": "410.455", "reason": "statement"},
    )
    assert created.status_code == 201
    assert created.json()["audit_update_data"] == {"amount_confirmed": "410.46"}

    duplicate = client.post(
        f"/audits/{audit.id}/amount-confirmed-requests", headers=headers, json={"amount_confirmed": "1"}
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "DUPLICATE_PENDING_REQUEST"

    forbidden = client.post(
        f"/audits/{audit.id}/amount-confirmed-requests", headers=ctx["staff"], json={"amount_confirmed": "1"}
    )
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "PERMISSION_DENIED"


def test_generic_audit_request_is_guarded(client, db_session):
    ctx = _setup(client, db_session)
    audit = create_audit(db_session, ctx["property"])

    negative = client.post(
        "/pending-actions",
        headers=ctx["staff"],
        json={
            "resource_type": "audit",
            "action_type": "AUDIT_UPDATE_AMOUNT_CONFIRMED",
            "audit_id": str(audit.id),
            "audit_update_data": {"amount_confirmed": "-5"},
        },
    )
    assert negative.status_code == 422

    payload = {
        "resource_type": "audit",
        "action_type": "AUDIT_UPDATE_AMOUNT_CONFIRMED",
        "audit_id": str(audit.id),
        "audit_update_data": {"amount_confirmed": "12.5"},
    }
    assert client.post("/pending-actions", headers=ctx["staff"], json=payload).status_code == 201
    duplicate = client.post("/pending-actions", headers=ctx["staff"], json=payload)
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "DUPLICATE_PENDING_REQUEST"


def test_property_action_requires_property(client, db_session):
    ctx = _setup(client, db_session)

    response = client.post(
        "/pending-actions",
        headers=ctx["staff"],
        json={
            "resource_type": "property",
            "action_type": "PROPERTY_TRANSFER",
            "transfer_data": {"new_portfolio_id": str(ctx["target"].id)},
        },
    )
    assert response.status_code == 400
    assert response.json()["code"] == "RESOURCE_ID_REQUIRED"
    assert response.json()["details"]["field"] == "property_id"
