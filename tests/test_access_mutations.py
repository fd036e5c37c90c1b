import uuid

import pytest
from sqlalchemy import select

from app.hotelport.core.error_catalog import AppError, ErrorCatalog
from app.hotelport.core.permissions import ModuleType
from app.hotelport.db.models import AuditEvent
from app.hotelport.services.access_control import PermissionService
from tests.factories import create_access_record, create_role, create_super_admin_role, create_user, perm


@pytest.fixture()
def admin(db_session):
    return create_user(db_session, create_super_admin_role(db_session))


def _partial_user(db_session, **record):
    role = create_role(
        db_session,
        permissions={
            ModuleType.PORTFOLIO: perm("view", "partial"),
            ModuleType.PROPERTY: perm("update", "partial"),
            ModuleType.AUDIT: perm("view", "all"),
        },
    )
    user = create_user(db_session, role)
    if record:
        create_access_record(db_session, user, **record)
    return user


def test_add_access_merges_without_duplicates(db_session, admin):
    target = _partial_user(db_session, property_ids=["P1"])
    service = PermissionService(db_session)

    record = service.add_access(admin, target.id, ModuleType.PROPERTY, ["P1", "P2", "P2"])

    assert record.property_ids == ["P1", "P2"]
    assert record.portfolio_ids == []


def test_add_access_creates_missing_record(db_session, admin):
    target = _partial_user(db_session)

    record = PermissionService(db_session).add_access(admin, str(target.id), ModuleType.PORTFOLIO, ["PF1"])

    assert record.portfolio_ids == ["PF1"]


def test_revoke_access_filters_ids(db_session, admin):
    target = _partial_user(db_session, portfolio_ids=["PF1", "PF2"], property_ids=["P1"])

    record = PermissionService(db_session).revoke_access(admin, target.id, ModuleType.PORTFOLIO, ["PF1", "PF9"])

    assert record.portfolio_ids == ["PF2"]
    assert record.property_ids == ["P1"]


def test_add_requires_partial_access_on_target_role(db_session, admin):
    target = _partial_user(db_session)

    with pytest.raises(AppError) as exc:
        PermissionService(db_session).add_access(admin, target.id, ModuleType.AUDIT, ["A1"])
    assert exc.value.error == ErrorCatalog.PARTIAL_ACCESS_NOT_CONFIGURED

    full_role = create_role(db_session, permissions={ModuleType.PROPERTY: perm("all", "all")})
    full_user = create_user(db_session, full_role)
    with pytest.raises(AppError) as exc:
        PermissionService(db_session).revoke_access(admin, full_user.id, ModuleType.PROPERTY, ["P1"])
    assert exc.value.error == ErrorCatalog.PARTIAL_ACCESS_NOT_CONFIGURED


def test_admin_cannot_modify_own_access(db_session, admin):
    with pytest.raises(AppError) as exc:
        PermissionService(db_session).add_access(admin, admin.id, ModuleType.PROPERTY, ["P1"])
    assert exc.value.error == ErrorCatalog.SELF_MODIFICATION_FORBIDDEN


def test_unknown_target_user(db_session, admin):
    with pytest.raises(AppError) as exc:
        PermissionService(db_session).add_access(admin, uuid.uuid4(), ModuleType.PROPERTY, ["P1"])
    assert exc.value.error == ErrorCatalog.USER_NOT_FOUND


def test_replace_and_clear_access(db_session, admin):
    target = _partial_user(db_session, portfolio_ids=["PF1"], property_ids=["P1", "P2"])
    service = PermissionService(db_session)

    record = service.replace_access(admin, target.id, property_ids=["P3", "P3", "P4"])
    assert record.property_ids == ["P3", "P4"]
    assert record.portfolio_ids == ["PF1"]

    record = service.clear_access(admin, target.id)
    assert record.property_ids == []
    assert record.portfolio_ids == []


def test_mutations_write_audit_trail(db_session, admin):
    target = _partial_user(db_session)

    PermissionService(db_session).add_access(admin, target.id, ModuleType.PROPERTY, ["P1"])

    event = db_session.execute(select(AuditEvent).where(AuditEvent.action == "access.add")).scalars().one()
    assert event.entity_id == str(target.id)
    assert event.user_id == admin.id
    assert event.after_payload["property_ids"] == ["P1"]


def test_clear_access_requires_partial_role(db_session, admin):
    role = create_role(db_session, permissions={ModuleType.PROPERTY: perm("update", "all")})
    target = create_user(db_session, role, email="full@example.com")
    create_access_record(db_session, target, property_ids=["P1"])

    with pytest.raises(AppError) as exc:
        PermissionService(db_session).clear_access(admin, target.id)

    assert exc.value.error == ErrorCatalog.PARTIAL_ACCESS_NOT_CONFIGURED
    db_session.expire_all()
    assert PermissionService(db_session).access_records.get_by_user_id(target.id).property_ids == ["P1"]
