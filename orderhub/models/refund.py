from orderhub.extensions import db
from orderhub.models.base import BaseModel
from orderhub.enums.payment import RefundStatus
from datetime import datetime

import const


class RefundRequest(db.Model, BaseModel):
    __tablename__ = "refund_requests"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer,
        db.ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    reason = db.Column(db.String(50), nullable=False)
    note = db.Column(db.Text, nullable=True)
    evidence_image = db.Column(db.String(500), nullable=False)
    evidence_video = db.Column(db.String(500), nullable=False)
    status = db.Column(
        db.String(20), nullable=False, default=RefundStatus.PENDING.value
    )
    requested_at = db.Column(db.DateTime, default=datetime.now)
    processed_at = db.Column(db.DateTime, nullable=True)
    processed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    admin_note = db.Column(db.Text, nullable=True)

    order = db.relationship("Order", back_populates="refund_requests")

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "customer_id": self.customer_id,
            "reason": self.reason,
            "reason_label": const.REFUND_REASONS.get(self.reason, self.reason),
            "note": self.note,
            "evidence_image": self.evidence_image,
            "evidence_video": self.evidence_video,
            "status": self.status,
            "admin_note": self.admin_note,
            "processed_by": self.processed_by,
            "requested_at": (
                self.requested_at.strftime("%Y-%m-%d %H:%M:%S")
                if self.requested_at
                else None
            ),
            "processed_at": (
                self.processed_at.strftime("%Y-%m-%d %H:%M:%S")
                if self.processed_at
                else None
            ),
        }
