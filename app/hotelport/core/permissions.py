"""Permission primitives: levels, access scopes, modules and the action matrix.

A role carries one optional ``Permission`` per module. The permission level
decides which CRUD actions are allowed; the access level decides which
resources of the module can be reached (every resource, an explicit per-user
id-set, or nothing).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Literal, Mapping


class PermissionLevel(str, Enum):
    ALL = "all"
    UPDATE = "update"
    VIEW = "view"


class AccessLevel(str, Enum):
    ALL = "all"
    PARTIAL = "partial"
    NONE = "none"


class PermissionAction(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class ModuleType(str, Enum):
    PORTFOLIO = "portfolio"
    PROPERTY = "property"
    AUDIT = "audit"
    USER = "user"
    SYSTEM_SETTINGS = "system_settings"
    BANK_DETAILS = "bank_details"


ALL_RESOURCES: Literal["all"] = "all"

AccessibleIds = Literal["all"] | list[str]

PERMISSION_MATRIX: Mapping[PermissionLevel, Mapping[PermissionAction, bool]] = MappingProxyType(
    {
        PermissionLevel.ALL: MappingProxyType(
            {
                PermissionAction.CREATE: True,
                PermissionAction.READ: True,
                PermissionAction.UPDATE: True,
                PermissionAction.DELETE: True,
            }
        ),
        PermissionLevel.UPDATE: MappingProxyType(
            {
                PermissionAction.CREATE: True,
                PermissionAction.READ: True,
                PermissionAction.UPDATE: True,
                PermissionAction.DELETE: False,
            }
        ),
        PermissionLevel.VIEW: MappingProxyType(
            {
                PermissionAction.CREATE: False,
                PermissionAction.READ: True,
                PermissionAction.UPDATE: False,
                PermissionAction.DELETE: False,
            }
        ),
    }
)

# Role column holding each module's permission.
MODULE_PERMISSION_FIELDS: Mapping[ModuleType, str] = MappingProxyType(
    {
        ModuleType.PORTFOLIO: "portfolio_permission",
        ModuleType.PROPERTY: "property_permission",
        ModuleType.AUDIT: "audit_permission",
        ModuleType.USER: "user_permission",
        ModuleType.SYSTEM_SETTINGS: "system_settings_permission",
        ModuleType.BANK_DETAILS: "bank_details_permission",
    }
)

PARTIAL_CAPABLE_MODULES = frozenset({ModuleType.PORTFOLIO, ModuleType.PROPERTY, ModuleType.BANK_DETAILS})

# Access-record column backing each partial-capable module. Bank details reuse the property id-set.
ACCESS_RECORD_FIELDS: Mapping[ModuleType, str] = MappingProxyType(
    {
        ModuleType.PORTFOLIO: "portfolio_ids",
        ModuleType.PROPERTY: "property_ids",
        ModuleType.BANK_DETAILS: "property_ids",
    }
)

_LEVEL_RANK = MappingProxyType({PermissionLevel.ALL: 3, PermissionLevel.UPDATE: 2, PermissionLevel.VIEW: 1})
_ACCESS_RANK = MappingProxyType({AccessLevel.ALL: 3, AccessLevel.PARTIAL: 2, AccessLevel.NONE: 1})


@dataclass(frozen=True)
class Permission:
    permission_level: PermissionLevel
    access_level: AccessLevel

    def to_dict(self) -> dict[str, str]:
        return {
            "permission_level": self.permission_level.value,
            "access_level": self.access_level.value,
        }


@dataclass(frozen=True)
class RolePermissions:
    """Immutable view of a role's per-module permissions."""

    role_id: str | None
    name: str
    is_external: bool
    permissions: Mapping[ModuleType, Permission | None] = field(default_factory=dict)
    can_access_mis: bool = False

    def for_module(self, module: ModuleType | str) -> Permission | None:
        return self.permissions.get(ModuleType(module))

    @classmethod
    def from_role(cls, role) -> "RolePermissions":
        permissions = {
            module: parse_permission(getattr(role, column, None))
            for module, column in MODULE_PERMISSION_FIELDS.items()
        }
        return cls(
            role_id=str(role.id) if getattr(role, "id", None) is not None else None,
            name=role.name,
            is_external=bool(role.is_external),
            permissions=MappingProxyType(permissions),
            can_access_mis=bool(getattr(role, "can_access_mis", False)),
        )


def parse_permission(raw: Any) -> Permission | None:
    if raw is None:
        return None
    if isinstance(raw, Permission):
        return raw
    if not isinstance(raw, Mapping):
        raise ValueError(f"Invalid permission value: {raw!r}")
    return Permission(
        permission_level=PermissionLevel(raw["permission_level"]),
        access_level=AccessLevel(raw["access_level"]),
    )


def is_action_allowed(level: PermissionLevel | str, action: PermissionAction | str) -> bool:
    # Unknown levels or actions raise ValueError.
    return PERMISSION_MATRIX[PermissionLevel(level)][PermissionAction(action)]


def allowed_actions(level: PermissionLevel | str) -> list[PermissionAction]:
    return [action for action in PermissionAction if is_action_allowed(level, action)]


def module_supports_partial_access(module: ModuleType | str) -> bool:
    return ModuleType(module) in PARTIAL_CAPABLE_MODULES


def effective_access_level(module: ModuleType | str, permission: Permission | None) -> AccessLevel:
    """Access level as enforced at check time.

    A missing permission, or ``partial`` on a module without partial support,
    resolves to ``none``.
    """
    if permission is None:
        return AccessLevel.NONE
    if permission.access_level == AccessLevel.PARTIAL and not module_supports_partial_access(module):
        return AccessLevel.NONE
    return permission.access_level


def is_super_admin(permission: Permission | None) -> bool:
    if permission is None:
        return False
    return permission.permission_level == PermissionLevel.ALL and permission.access_level == AccessLevel.ALL


def is_user_super_admin(role: RolePermissions | None) -> bool:
    if role is None:
        return False
    return all(is_super_admin(role.for_module(module)) for module in ModuleType)


def is_internal_user(role: RolePermissions | None) -> bool:
    return role is not None and not role.is_external


def is_external_user(role: RolePermissions | None) -> bool:
    return role is not None and role.is_external


def permission_description(permission: Permission | None) -> str:
    if permission is None:
        return "No permission"
    level_desc = {
        PermissionLevel.ALL: "Full CRUD",
        PermissionLevel.UPDATE: "Create, Read, Update",
        PermissionLevel.VIEW: "Read only",
    }
    access_desc = {
        AccessLevel.ALL: "all resources",
        AccessLevel.PARTIAL: "assigned resources only",
        AccessLevel.NONE: "no resources",
    }
    return f"{level_desc[permission.permission_level]} on {access_desc[permission.access_level]}"


def is_permission_equal_or_higher(candidate: Permission | None, baseline: Permission | None) -> bool:
    if baseline is None:
        return True
    if candidate is None:
        return False
    return (
        _LEVEL_RANK[candidate.permission_level] >= _LEVEL_RANK[baseline.permission_level]
        and _ACCESS_RANK[candidate.access_level] >= _ACCESS_RANK[baseline.access_level]
    )


def can_invite_role(inviter: RolePermissions, target: RolePermissions) -> bool:
    if inviter.is_external and not target.is_external:
        return False
    return all(
        is_permission_equal_or_higher(inviter.for_module(module), target.for_module(module))
        for module in ModuleType
    )


def can_request_property_transfer(role: RolePermissions) -> bool:
    if is_user_super_admin(role):
        return True
    if not is_internal_user(role):
        return False
    permission = role.for_module(ModuleType.PROPERTY)
    if permission is None:
        return False
    return permission.permission_level in {PermissionLevel.ALL, PermissionLevel.UPDATE} and (
        permission.access_level in {AccessLevel.ALL, AccessLevel.PARTIAL}
    )
