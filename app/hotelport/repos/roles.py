from sqlalchemy import func, select

from app.hotelport.db.models import UserRole, as_uuid


class RoleRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, role_id):
        try:
            return self.db.get(UserRole, as_uuid(role_id))
        except ValueError:
            return None

    def get_by_name(self, name: str):
        stmt = select(UserRole).where(func.lower(UserRole.name) == name.strip().lower())
        return self.db.execute(stmt).scalars().first()

    def create(self, role: UserRole) -> UserRole:
        self.db.add(role)
        self.db.flush()
        return role
