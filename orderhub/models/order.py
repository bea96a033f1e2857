from orderhub.extensions import db
from orderhub.models.base import BaseModel
from orderhub.enums.order import OrderStatus
from orderhub.enums.payment import RefundStatus

import const


class Order(db.Model, BaseModel):
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint(
            "customer_id", "idempotency_key", name="uq_orders_customer_idempotency"
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(50), nullable=False, unique=True)
    store_id = db.Column(db.String(64), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    shipper_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    subtotal = db.Column(db.BigInteger, nullable=False, default=0)
    discount_amount = db.Column(db.BigInteger, nullable=False, default=0)
    delivery_fee = db.Column(db.BigInteger, nullable=False, default=0)
    total = db.Column(db.BigInteger, nullable=False, default=0)
    promo_code = db.Column(db.String(50), nullable=True)

    payment_method = db.Column(db.String(30), nullable=False)
    payment_state = db.Column(db.String(20), nullable=True)
    paid_at = db.Column(db.DateTime, nullable=True)

    status = db.Column(
        db.String(20), nullable=False, default=OrderStatus.PENDING.value, index=True
    )
    cancel_reason = db.Column(db.Text, nullable=True)

    delivery_address = db.Column(db.String(500), nullable=False)
    phone = db.Column(db.String(30), nullable=False)

    idempotency_key = db.Column(db.String(100), nullable=True)

    accepted_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    items = db.relationship(
        "OrderItem",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    refund_requests = db.relationship(
        "RefundRequest",
        order_by="RefundRequest.id.desc()",
        cascade="all, delete-orphan",
        lazy="selectin",
        back_populates="order",
    )
    customer = db.relationship("User", foreign_keys=[customer_id])
    shipper = db.relationship("User", foreign_keys=[shipper_id])

    @property
    def has_refund(self):
        return len(self.refund_requests) > 0

    @property
    def active_refund(self):
        for refund in self.refund_requests:
            if refund.status == RefundStatus.PENDING.value:
                return refund
        return None

    @property
    def refund_label(self):
        if not self.refund_requests:
            return None
        return const.REFUND_LABELS.get(self.refund_requests[0].status)

    def to_dict(self):
        data = self._to_json()
        data.update(
            {
                "items": [item.to_dict() for item in self.items],
                "refund_requests": [
                    refund.to_dict() for refund in self.refund_requests
                ],
                "has_refund": self.has_refund,
                "refund_label": self.refund_label,
            }
        )
        return data


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    position = db.Column(db.Integer, nullable=False, default=0)
    product_ref = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=True, default="")
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.BigInteger, nullable=False)
    selected_options = db.Column(db.JSON, nullable=True)

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def to_dict(self):
        return {
            "product_ref": self.product_ref,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "selected_options": self.selected_options or {},
            "line_total": self.line_total,
        }
