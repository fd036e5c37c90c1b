from sqlalchemy import cast, select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import IntegrityError

from app.hotelport.db.models import UserAccessRecord, as_uuid


class AccessRecordRepository:
    def __init__(self, db):
        self.db = db

    def get_by_user_id(self, user_id, *, for_update: bool = False) -> UserAccessRecord | None:
        stmt = select(UserAccessRecord).where(UserAccessRecord.user_id == as_uuid(user_id))
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalars().first()

    def get_or_create_for_update(self, user_id) -> UserAccessRecord:
        """Return the user's record locked for update, creating it when missing.

        A concurrent creator wins the unique ``user_id`` race; the loser's
        savepoint is rolled back and the winner's row is re-read.
        """
        record = self.get_by_user_id(user_id, for_update=True)
        if record is not None:
            return record
        try:
            with self.db.begin_nested():
                record = UserAccessRecord(user_id=as_uuid(user_id), portfolio_ids=[], property_ids=[])
                self.db.add(record)
        except IntegrityError:
            record = self.get_by_user_id(user_id, for_update=True)
        return record

    def list_holding_property_for_update(self, property_id: str) -> list[UserAccessRecord]:
        stmt = select(UserAccessRecord).order_by(UserAccessRecord.user_id).with_for_update()
        if self.db.get_bind().dialect.name == "postgresql":
            stmt = stmt.where(cast(UserAccessRecord.property_ids, JSONB).contains([property_id]))
        # SQLite has no JSON containment operator; its rows are filtered after the read.
        records = self.db.execute(stmt).scalars().all()
        return [record for record in records if property_id in (record.property_ids or [])]
