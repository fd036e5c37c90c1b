from sqlalchemy import select

from app.hotelport.db.models import Audit, as_uuid


class AuditRecordRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, audit_id):
        try:
            return self.db.get(Audit, as_uuid(audit_id))
        except ValueError:
            return None

    def get_for_update(self, audit_id):
        try:
            stmt = select(Audit).where(Audit.id == as_uuid(audit_id)).with_for_update()
        except ValueError:
            return None
        return self.db.execute(stmt).scalars().first()
