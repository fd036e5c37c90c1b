from app.hotelport.db.models import AuditEvent


class AuditRepository:
    def __init__(self, db):
        self.db = db

    def create(self, event: AuditEvent) -> AuditEvent:
        # Savepoint so a failed trail write leaves the caller's transaction usable.
        with self.db.begin_nested():
            self.db.add(event)
        return event
