from sqlalchemy import select

from app.hotelport.core.config import settings
from app.hotelport.core.permissions import MODULE_PERMISSION_FIELDS, AccessLevel, Permission, PermissionLevel
from app.hotelport.core.security import get_password_hash
from app.hotelport.db.models import User, UserRole


FULL_ACCESS = Permission(PermissionLevel.ALL, AccessLevel.ALL).to_dict()


def _get_or_create_superadmin_role(db):
    role = db.execute(select(UserRole).where(UserRole.name == settings.SUPERADMIN_ROLE_NAME)).scalars().first()
    if role:
        return role
    role = UserRole(
        name=settings.SUPERADMIN_ROLE_NAME,
        description="System role: full access to every module",
        is_external=False,
        can_access_mis=True,
        **{column: dict(FULL_ACCESS) for column in MODULE_PERMISSION_FIELDS.values()},
    )
    db.add(role)
    db.flush()
    return role


def _get_or_create_superadmin(db, role):
    user = db.execute(select(User).where(User.email == settings.SUPERADMIN_EMAIL)).scalars().first()
    if user:
        return user
    user = User(
        email=settings.SUPERADMIN_EMAIL,
        name="Super Admin",
        hashed_password=get_password_hash(settings.SUPERADMIN_PASSWORD),
        role_id=role.id,
        is_active=True,
    )
    db.add(user)
    return user


def run_seed(db):
    role = _get_or_create_superadmin_role(db)
    _get_or_create_superadmin(db, role)
    db.commit()
