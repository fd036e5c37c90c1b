from sqlalchemy import select

from app.hotelport.db.models import Property, as_uuid


class PropertyRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, property_id):
        try:
            return self.db.get(Property, as_uuid(property_id))
        except ValueError:
            return None

    def get_for_update(self, property_id):
        try:
            stmt = select(Property).where(Property.id == as_uuid(property_id)).with_for_update()
        except ValueError:
            return None
        return self.db.execute(stmt).scalars().first()
