from types import SimpleNamespace

import pytest

from app.hotelport.core.permissions import (
    AccessLevel,
    ModuleType,
    Permission,
    PermissionAction,
    PermissionLevel,
    RolePermissions,
    allowed_actions,
    can_invite_role,
    can_request_property_transfer,
    effective_access_level,
    is_action_allowed,
    is_permission_equal_or_higher,
    is_user_super_admin,
    module_supports_partial_access,
    parse_permission,
    permission_description,
)


EXPECTED = {
    ("all", "create"): True,
    ("all", "read"): True,
    ("all", "update"): True,
    ("all", "delete"): True,
    ("update", "create"): True,
    ("update", "read"): True,
    ("update", "update"): True,
    ("update", "delete"): False,
    ("view", "create"): False,
    ("view", "read"): True,
    ("view", "update"): False,
    ("view", "delete"): False,
}


def _role(is_external=False, **permissions):
    columns = {
        "portfolio_permission": None,
        "property_permission": None,
        "audit_permission": None,
        "user_permission": None,
        "system_settings_permission": None,
        "bank_details_permission": None,
    }
    for module, value in permissions.items():
        columns[f"{module}_permission"] = value
    return RolePermissions.from_role(SimpleNamespace(id=None, name="role", is_external=is_external, **columns))


def _full():
    return {"permission_level": "all", "access_level": "all"}


@pytest.mark.parametrize("level,action", sorted(EXPECTED))
def test_matrix_matches_table(level, action):
    assert is_action_allowed(level, action) is EXPECTED[(level, action)]


def test_matrix_is_total_over_enums():
    for level in PermissionLevel:
        for action in PermissionAction:
            assert isinstance(is_action_allowed(level, action), bool)


def test_no_level_grants_delete_without_update_and_read():
    for level in PermissionLevel:
        if is_action_allowed(level, PermissionAction.DELETE):
            assert is_action_allowed(level, PermissionAction.UPDATE)
            assert is_action_allowed(level, PermissionAction.READ)


def test_unknown_level_or_action_fails_fast():
    with pytest.raises(ValueError):
        is_action_allowed("admin", "read")
    with pytest.raises(ValueError):
        is_action_allowed("all", "archive")


def test_matrix_cannot_be_mutated():
    from app.hotelport.core.permissions import PERMISSION_MATRIX

    with pytest.raises(TypeError):
        PERMISSION_MATRIX[PermissionLevel.VIEW][PermissionAction.DELETE] = True


def test_allowed_actions_per_level():
    assert allowed_actions("update") == [PermissionAction.CREATE, PermissionAction.READ, PermissionAction.UPDATE]
    assert allowed_actions("view") == [PermissionAction.READ]


def test_partial_capable_modules():
    assert module_supports_partial_access("portfolio")
    assert module_supports_partial_access("property")
    assert module_supports_partial_access("bank_details")
    assert not module_supports_partial_access("audit")
    assert not module_supports_partial_access("user")
    assert not module_supports_partial_access("system_settings")


def test_partial_on_unsupported_module_is_enforced_as_none():
    partial = Permission(PermissionLevel.ALL, AccessLevel.PARTIAL)
    assert effective_access_level(ModuleType.AUDIT, partial) == AccessLevel.NONE
    assert effective_access_level(ModuleType.PROPERTY, partial) == AccessLevel.PARTIAL
    assert effective_access_level(ModuleType.PROPERTY, None) == AccessLevel.NONE


def test_parse_permission_rejects_unknown_values():
    assert parse_permission(None) is None
    assert parse_permission({"permission_level": "view", "access_level": "none"}) == Permission(
        PermissionLevel.VIEW, AccessLevel.NONE
    )
    with pytest.raises(ValueError):
        parse_permission({"permission_level": "owner", "access_level": "all"})


def test_super_admin_requires_all_all_on_every_module():
    role = _role(
        portfolio=_full(),
        property=_full(),
        audit=_full(),
        user={"permission_level": "view", "access_level": "none"},
        system_settings=_full(),
        bank_details=_full(),
    )
    assert not is_user_super_admin(role)

    assert is_user_super_admin(_role(**{module.value: _full() for module in ModuleType}))
    assert not is_user_super_admin(_role(audit=_full()))


def test_permission_hierarchy():
    all_all = Permission(PermissionLevel.ALL, AccessLevel.ALL)
    update_partial = Permission(PermissionLevel.UPDATE, AccessLevel.PARTIAL)
    view_all = Permission(PermissionLevel.VIEW, AccessLevel.ALL)

    assert is_permission_equal_or_higher(all_all, update_partial)
    assert not is_permission_equal_or_higher(update_partial, all_all)
    assert not is_permission_equal_or_higher(view_all, update_partial)
    assert is_permission_equal_or_higher(None, None)
    assert not is_permission_equal_or_higher(None, view_all)


def test_external_role_cannot_invite_internal_role():
    external_admin = _role(is_external=True, **{module.value: _full() for module in ModuleType})
    internal_viewer = _role(property={"permission_level": "view", "access_level": "partial"})
    external_viewer = _role(is_external=True, property={"permission_level": "view", "access_level": "partial"})

    assert not can_invite_role(external_admin, internal_viewer)
    assert can_invite_role(external_admin, external_viewer)
    assert not can_invite_role(external_viewer, external_admin)


def test_can_request_property_transfer():
    assert can_request_property_transfer(_role(property={"permission_level": "update", "access_level": "partial"}))
    assert not can_request_property_transfer(_role(property={"permission_level": "view", "access_level": "all"}))
    assert not can_request_property_transfer(
        _role(is_external=True, property={"permission_level": "all", "access_level": "all"})
    )


def test_permission_description():
    assert permission_description(None) == "No permission"
    assert (
        permission_description(Permission(PermissionLevel.UPDATE, AccessLevel.PARTIAL))
        == "Create, Read, Update on assigned resources only"
    )
