from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from app.hotelport.core.error_catalog import AppError, ErrorCatalog
from app.hotelport.core.logging import log_json
from app.hotelport.core.metrics import metrics
from app.hotelport.core.permissions import (
    ACCESS_RECORD_FIELDS,
    ALL_RESOURCES,
    AccessLevel,
    AccessibleIds,
    ModuleType,
    PARTIAL_CAPABLE_MODULES,
    Permission,
    PermissionAction,
    PermissionLevel,
    RolePermissions,
    effective_access_level,
    is_action_allowed,
    is_user_super_admin,
    module_supports_partial_access,
)
from app.hotelport.repos.access_records import AccessRecordRepository
from app.hotelport.repos.users import UserRepository
from app.hotelport.services.audit import AuditEventPayload, AuditService


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    reason: str | None = None
    resource_denied: bool = False


def role_permissions_for(user) -> RolePermissions:
    return RolePermissions.from_role(user.role)


def _merge_ids(existing: Iterable[str], additions: Iterable[str]) -> list[str]:
    merged = list(existing)
    for resource_id in additions:
        if resource_id not in merged:
            merged.append(resource_id)
    return merged


def _filter_ids(existing: Iterable[str], removals: Iterable[str]) -> list[str]:
    removed = set(removals)
    return [resource_id for resource_id in existing if resource_id not in removed]


def _dedupe(resource_ids: Iterable[str]) -> list[str]:
    return _merge_ids([], (str(resource_id) for resource_id in resource_ids))


class PermissionService:
    """Evaluates module permissions and maintains per-user partial access lists.

    Read operations never commit. Admin mutations (add/revoke/replace/clear)
    commit their own unit of work; ``grant_resource_access`` and transfer
    propagation run inside the caller's transaction.
    """

    def __init__(self, db, *, audit_service: AuditService | None = None):
        self.db = db
        self.access_records = AccessRecordRepository(db)
        self.users = UserRepository(db)
        self.audit = audit_service or AuditService(db)

    def get_module_permission(self, user, module: ModuleType) -> Permission | None:
        return role_permissions_for(user).for_module(module)

    def check_permission(
        self,
        user,
        module: ModuleType,
        action: PermissionAction,
        resource_id: str | None = None,
    ) -> PermissionDecision:
        module = ModuleType(module)
        action = PermissionAction(action)
        permission = self.get_module_permission(user, module)

        if permission is None:
            return PermissionDecision(False, f"No permission found for module: {module.value}")

        access_level = effective_access_level(module, permission)
        if access_level == AccessLevel.NONE:
            return PermissionDecision(False, f"Access denied: No access to {module.value} module")

        if not is_action_allowed(permission.permission_level, action):
            return PermissionDecision(
                False,
                f"Action '{action.value}' not allowed with permission level '{permission.permission_level.value}'",
            )

        if access_level == AccessLevel.ALL:
            return PermissionDecision(True)

        if resource_id is None:
            return PermissionDecision(True)

        if not self.check_partial_access(user.id, module, resource_id):
            return PermissionDecision(
                False,
                f"Access denied: Resource not in user's accessible {module.value}s",
                resource_denied=True,
            )
        return PermissionDecision(True)

    def require_permission(
        self,
        user,
        module: ModuleType,
        action: PermissionAction,
        resource_id: str | None = None,
    ) -> PermissionDecision:
        decision = self.check_permission(user, module, action, resource_id)
        if decision.allowed:
            return decision

        log_json(
            logger,
            {
                "event": "permission_denied",
                "user_id": str(user.id),
                "module": ModuleType(module).value,
                "action": PermissionAction(action).value,
                "resource_id": resource_id,
                "reason": decision.reason,
            },
        )
        metrics.increment_permission_denied(
            module=ModuleType(module).value,
            action=PermissionAction(action).value,
            resource_denied=decision.resource_denied,
        )
        error = ErrorCatalog.RESOURCE_NOT_ACCESSIBLE if decision.resource_denied else ErrorCatalog.PERMISSION_DENIED
        raise AppError(error, details={"message": decision.reason, "module": ModuleType(module).value})

    def can_access_resource(self, user, module: ModuleType, resource_id: str) -> bool:
        module = ModuleType(module)
        access_level = effective_access_level(module, self.get_module_permission(user, module))
        if access_level == AccessLevel.NONE:
            return False
        if access_level == AccessLevel.ALL:
            return True
        return self.check_partial_access(user.id, module, resource_id)

    def get_accessible_resource_ids(self, user, module: ModuleType) -> AccessibleIds:
        module = ModuleType(module)
        access_level = effective_access_level(module, self.get_module_permission(user, module))
        if access_level == AccessLevel.NONE:
            return []
        if access_level == AccessLevel.ALL:
            return ALL_RESOURCES
        record = self.access_records.get_by_user_id(user.id)
        if record is None:
            return []
        return list(getattr(record, ACCESS_RECORD_FIELDS[module]) or [])

    def check_partial_access(self, user_id, module: ModuleType, resource_id: str) -> bool:
        module = ModuleType(module)
        if module not in PARTIAL_CAPABLE_MODULES:
            return False
        record = self.access_records.get_by_user_id(user_id)
        if record is None:
            return False
        return str(resource_id) in (getattr(record, ACCESS_RECORD_FIELDS[module]) or [])

    def grant_resource_access(self, user_id, module: ModuleType, resource_id: str) -> None:
        """Add ``resource_id`` to the user's list for ``module``; idempotent."""
        module = ModuleType(module)
        if not module_supports_partial_access(module):
            return
        field = ACCESS_RECORD_FIELDS[module]
        record = self.access_records.get_or_create_for_update(user_id)
        current = list(getattr(record, field) or [])
        if str(resource_id) in current:
            return
        setattr(record, field, _merge_ids(current, [str(resource_id)]))
        record.updated_at = datetime.utcnow()
        self.db.flush()
        log_json(
            logger,
            {
                "event": "access_granted",
                "user_id": str(user_id),
                "module": module.value,
                "resource_id": str(resource_id),
            },
        )

    def add_access(self, actor, user_id, module: ModuleType, resource_ids: Iterable[str]):
        module = ModuleType(module)
        target = self._load_target_user(actor, user_id)
        field = self._require_partial_field(target, module)
        record = self.access_records.get_or_create_for_update(target.id)
        before = list(getattr(record, field) or [])
        setattr(record, field, _merge_ids(before, _dedupe(resource_ids)))
        return self._commit_mutation(actor, target, record, "access.add", module, {field: before})

    def revoke_access(self, actor, user_id, module: ModuleType, resource_ids: Iterable[str]):
        module = ModuleType(module)
        target = self._load_target_user(actor, user_id)
        field = self._require_partial_field(target, module)
        record = self.access_records.get_or_create_for_update(target.id)
        before = list(getattr(record, field) or [])
        setattr(record, field, _filter_ids(before, _dedupe(resource_ids)))
        return self._commit_mutation(actor, target, record, "access.revoke", module, {field: before})

    def replace_access(
        self,
        actor,
        user_id,
        *,
        portfolio_ids: Iterable[str] | None = None,
        property_ids: Iterable[str] | None = None,
    ):
        target = self._load_target_user(actor, user_id)
        if portfolio_ids is not None:
            self._require_partial_field(target, ModuleType.PORTFOLIO)
        if property_ids is not None:
            self._require_partial_field(target, ModuleType.PROPERTY)
        record = self.access_records.get_or_create_for_update(target.id)
        before = {"portfolio_ids": list(record.portfolio_ids or []), "property_ids": list(record.property_ids or [])}
        if portfolio_ids is not None:
            record.portfolio_ids = _dedupe(portfolio_ids)
        if property_ids is not None:
            record.property_ids = _dedupe(property_ids)
        return self._commit_mutation(actor, target, record, "access.replace", None, before)

    def clear_access(self, actor, user_id):
        target = self._load_target_user(actor, user_id)
        if not any(
            effective_access_level(module, self.get_module_permission(target, module)) == AccessLevel.PARTIAL
            for module in ACCESS_RECORD_FIELDS
        ):
            raise AppError(
                ErrorCatalog.PARTIAL_ACCESS_NOT_CONFIGURED,
                details={"message": "User role does not have partial access for portfolio or property"},
            )
        record = self.access_records.get_or_create_for_update(target.id)
        before = {"portfolio_ids": list(record.portfolio_ids or []), "property_ids": list(record.property_ids or [])}
        record.portfolio_ids = []
        record.property_ids = []
        return self._commit_mutation(actor, target, record, "access.clear", None, before)

    def update_user_access_after_property_transfer(self, property_id: str, new_portfolio_id: str) -> list[str]:
        """Re-evaluate every holder of ``property_id`` after it moved to ``new_portfolio_id``.

        Holders whose portfolio access is ``none`` or ``all`` keep the property.
        Holders with ``partial`` portfolio access keep it only when the new
        portfolio is already in their portfolio list. Returns the ids of users
        who lost access.
        """
        property_id = str(property_id)
        new_portfolio_id = str(new_portfolio_id)
        removed_from: list[str] = []

        for record in self.access_records.list_holding_property_for_update(property_id):
            holder = self.users.get_by_id(record.user_id)
            if holder is None:
                continue
            portfolio_permission = self.get_module_permission(holder, ModuleType.PORTFOLIO)
            portfolio_access = effective_access_level(ModuleType.PORTFOLIO, portfolio_permission)

            if portfolio_access == AccessLevel.NONE:
                continue
            if portfolio_access == AccessLevel.ALL:
                continue
            if new_portfolio_id in (record.portfolio_ids or []):
                continue

            record.property_ids = _filter_ids(record.property_ids or [], [property_id])
            record.updated_at = datetime.utcnow()
            removed_from.append(str(record.user_id))

        self.db.flush()
        log_json(
            logger,
            {
                "event": "transfer_access_propagated",
                "property_id": property_id,
                "new_portfolio_id": new_portfolio_id,
                "removed_from": removed_from,
            },
        )
        return removed_from

    @staticmethod
    def validate_role_configuration(permissions: RolePermissions) -> list[str]:
        """Human-readable warnings for a role; never blocks saving it."""
        warnings: list[str] = []
        for module in ModuleType:
            permission = permissions.for_module(module)
            if permission is None:
                continue
            if permission.access_level == AccessLevel.PARTIAL and not module_supports_partial_access(module):
                warnings.append(
                    f"Module '{module.value}' does not support partial access; it will be treated as no access"
                )
            if permission.access_level == AccessLevel.NONE and permission.permission_level != PermissionLevel.VIEW:
                warnings.append(
                    f"Module '{module.value}' has permission level '{permission.permission_level.value}' "
                    "but access level 'none'; no actions will be allowed"
                )

        bank_details = permissions.for_module(ModuleType.BANK_DETAILS)
        property_permission = permissions.for_module(ModuleType.PROPERTY)
        if (
            bank_details is not None
            and bank_details.access_level == AccessLevel.PARTIAL
            and (property_permission is None or property_permission.access_level != AccessLevel.PARTIAL)
        ):
            warnings.append(
                "Bank details partial access is derived from the property access list, "
                "but property access is not partial"
            )

        if permissions.is_external and is_user_super_admin(permissions):
            warnings.append("External role has full access to every module")
        return warnings

    def _load_target_user(self, actor, user_id):
        target = self.users.get_by_id(user_id)
        if target is None:
            raise AppError(ErrorCatalog.USER_NOT_FOUND)
        if str(target.id) == str(actor.id):
            raise AppError(ErrorCatalog.SELF_MODIFICATION_FORBIDDEN)
        return target

    def _require_partial_field(self, target, module: ModuleType) -> str:
        permission = self.get_module_permission(target, module)
        if effective_access_level(module, permission) != AccessLevel.PARTIAL:
            raise AppError(
                ErrorCatalog.PARTIAL_ACCESS_NOT_CONFIGURED,
                details={
                    "message": f"User role does not have partial access for module: {module.value}",
                    "module": module.value,
                },
            )
        return ACCESS_RECORD_FIELDS[module]

    def _commit_mutation(self, actor, target, record, action: str, module: ModuleType | None, before: dict):
        record.updated_at = datetime.utcnow()
        after = {"portfolio_ids": list(record.portfolio_ids or []), "property_ids": list(record.property_ids or [])}
        self.audit.record_event(
            AuditEventPayload(
                user_id=str(actor.id),
                action=action,
                entity_type="user_access_record",
                entity_id=str(target.id),
                before=before,
                after=after,
                metadata={"module": module.value if module else None},
            )
        )
        self.db.commit()
        self.db.refresh(record)
        log_json(
            logger,
            {
                "event": action,
                "actor_id": str(actor.id),
                "user_id": str(target.id),
                "module": module.value if module else None,
                **after,
            },
        )
        return record
