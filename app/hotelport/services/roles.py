import logging
from datetime import datetime

from app.hotelport.core.error_catalog import AppError, ErrorCatalog
from app.hotelport.core.permissions import MODULE_PERMISSION_FIELDS, RolePermissions, parse_permission
from app.hotelport.db.models import UserRole
from app.hotelport.repos.roles import RoleRepository
from app.hotelport.services.access_control import PermissionService
from app.hotelport.services.audit import AuditEventPayload, AuditService

logger = logging.getLogger(__name__)


def _permission_columns(permissions: dict) -> dict:
    columns = {}
    for module, column in MODULE_PERMISSION_FIELDS.items():
        if module.value in permissions:
            parsed = parse_permission(permissions[module.value])
            columns[column] = parsed.to_dict() if parsed else None
    return columns


class RoleService:
    def __init__(self, db, *, audit_service: AuditService | None = None):
        self.db = db
        self.repo = RoleRepository(db)
        self.audit = audit_service or AuditService(db)

    def create_role(
        self,
        actor,
        *,
        name: str,
        is_external: bool = False,
        can_access_mis: bool = False,
        description: str | None = None,
        permissions: dict | None = None,
    ) -> tuple[UserRole, list[str]]:
        if self.repo.get_by_name(name) is not None:
            raise AppError(ErrorCatalog.ROLE_NAME_TAKEN)

        role = UserRole(
            name=name.strip(),
            description=description,
            is_external=is_external,
            can_access_mis=can_access_mis,
            **_permission_columns(permissions or {}),
        )
        warnings = self._warn_on_configuration(role, "Creating")
        self.repo.create(role)
        self._record(actor, "role.create", role, before=None)
        self.db.commit()
        self.db.refresh(role)
        return role, warnings

    def update_role(self, actor, role_id, **changes) -> tuple[UserRole, list[str]]:
        role = self.repo.get_by_id(role_id)
        if role is None:
            raise AppError(ErrorCatalog.ROLE_NOT_FOUND)

        before = self._snapshot(role)
        name = changes.get("name")
        if name and name.strip() != role.name:
            existing = self.repo.get_by_name(name)
            if existing is not None and existing.id != role.id:
                raise AppError(ErrorCatalog.ROLE_NAME_TAKEN)
            role.name = name.strip()

        for field in ("description", "is_external", "can_access_mis"):
            if changes.get(field) is not None:
                setattr(role, field, changes[field])
        for column, value in _permission_columns(changes.get("permissions") or {}).items():
            setattr(role, column, value)

        warnings = self._warn_on_configuration(role, "Updating")
        role.updated_at = datetime.utcnow()
        self._record(actor, "role.update", role, before=before)
        self.db.commit()
        self.db.refresh(role)
        return role, warnings

    def _warn_on_configuration(self, role: UserRole, verb: str) -> list[str]:
        warnings = PermissionService.validate_role_configuration(RolePermissions.from_role(role))
        if warnings:
            logger.warning('%s role "%s" with potential issues:', verb, role.name)
            for warning in warnings:
                logger.warning("  - %s", warning)
        return warnings

    @staticmethod
    def _snapshot(role: UserRole) -> dict:
        snapshot = {column: getattr(role, column) for column in MODULE_PERMISSION_FIELDS.values()}
        snapshot.update({"name": role.name, "is_external": role.is_external})
        return snapshot

    def _record(self, actor, action: str, role: UserRole, *, before: dict | None) -> None:
        self.audit.record_event(
            AuditEventPayload(
                user_id=str(actor.id),
                action=action,
                entity_type="user_role",
                entity_id=str(role.id),
                before=before,
                after=self._snapshot(role),
            )
        )
