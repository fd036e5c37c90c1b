from app.hotelport.db.models import Portfolio, as_uuid


class PortfolioRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, portfolio_id):
        try:
            return self.db.get(Portfolio, as_uuid(portfolio_id))
        except ValueError:
            return None
