from datetime import datetime

from orderhub.extensions import db
from orderhub.models.base import BaseModel


class Promotion(db.Model, BaseModel):
    __tablename__ = "promotions"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), nullable=False, unique=True)
    title = db.Column(db.String(250), nullable=False)
    description = db.Column(db.Text)
    discount_percent = db.Column(db.Integer, nullable=False, default=0)
    max_discount = db.Column(db.BigInteger, nullable=True)
    min_order = db.Column(db.BigInteger, nullable=False, default=0)
    expired_at = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True)

    def is_expired(self, now=None):
        now = now or datetime.now()
        return self.expired_at is not None and self.expired_at < now

    def calculate_discount(self, subtotal):
        discount = int(subtotal * self.discount_percent / 100)
        if self.max_discount:
            discount = min(discount, self.max_discount)
        return max(discount, 0)
