from sqlalchemy import select

from app.hotelport.db.models import User, as_uuid


class UserRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, user_id):
        try:
            return self.db.get(User, as_uuid(user_id))
        except ValueError:
            return None

    def get_by_email(self, email: str):
        return self.db.execute(select(User).where(User.email == email)).scalars().first()
