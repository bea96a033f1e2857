from datetime import datetime

from sqlalchemy import select

from orderhub.enums.order import UserRole
from orderhub.enums.payment import RefundReason, RefundStatus
from orderhub.errors.exceptions import (
    BadRequest,
    IncompleteRefundSubmission,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    RefundNotAllowed,
)
from orderhub.extensions import db
from orderhub.lib import lifecycle
from orderhub.lib.logger import log_refund_message
from orderhub.lib.query import update_where
from orderhub.lib.string import is_blank
from orderhub.models.order import Order
from orderhub.models.refund import RefundRequest

REFUND_REASONS = [reason.value for reason in RefundReason]
DECISIONS = (RefundStatus.APPROVED.value, RefundStatus.REJECTED.value)


class RefundService:

    @staticmethod
    def find_refund(id):
        return db.session.get(RefundRequest, id)

    @staticmethod
    def validate_submission(reason, note, evidence_image, evidence_video):
        missing = []
        if is_blank(reason) or reason not in REFUND_REASONS:
            missing.append("reason")
        elif reason == RefundReason.OTHER.value and is_blank(note):
            missing.append("note")
        if is_blank(evidence_image):
            missing.append("evidence_image")
        if is_blank(evidence_video):
            missing.append("evidence_video")
        if missing:
            raise IncompleteRefundSubmission(data={"fields": missing})

    @staticmethod
    def submit_refund_request(
        order_id, customer, reason, note, evidence_image, evidence_video
    ):
        RefundService.validate_submission(reason, note, evidence_image, evidence_video)

        # Row lock so two submissions for one order cannot both pass the check
        order = db.session.execute(
            select(Order).where(Order.id == order_id).with_for_update()
        ).scalar_one_or_none()
        if not order:
            raise NotFound(message=f"Order {order_id} not found")
        if order.customer_id != customer.id:
            raise PermissionDenied(message="You cannot request a refund for this order")
        if not lifecycle.is_terminal(order.status):
            db.session.rollback()
            raise RefundNotAllowed(
                message="Refunds can only be requested for completed or cancelled orders"
            )
        if order.active_refund is not None:
            db.session.rollback()
            raise RefundNotAllowed(
                message="A refund request for this order is already being processed"
            )

        refund = RefundRequest(
            order_id=order.id,
            customer_id=customer.id,
            reason=reason,
            note=(note or "").strip() or None,
            evidence_image=evidence_image.strip(),
            evidence_video=evidence_video.strip(),
            status=RefundStatus.PENDING.value,
        )
        refund.save()

        log_refund_message(
            f"Refund request {refund.id} submitted for {order.order_number}: {reason}",
            order.id,
        )
        return refund

    @staticmethod
    def resolve_refund_request(refund_id, actor, decision, admin_note=None):
        if actor.role not in (UserRole.STAFF.value, UserRole.ADMIN.value):
            raise PermissionDenied(message="Only store staff can resolve refunds")
        if decision not in DECISIONS:
            raise BadRequest(message=f"Unknown refund decision: {decision}")

        refund = RefundService.find_refund(refund_id)
        if not refund:
            raise NotFound(message=f"Refund request {refund_id} not found")

        rows = update_where(
            RefundRequest,
            [
                RefundRequest.id == refund.id,
                RefundRequest.status == RefundStatus.PENDING.value,
            ],
            {
                "status": decision,
                "processed_by": actor.id,
                "processed_at": datetime.now(),
                "admin_note": admin_note,
            },
        )
        db.session.expire_all()
        refund = RefundService.find_refund(refund_id)
        if rows == 0:
            raise InvalidTransition(
                message=f"Refund request is already {refund.status}"
            )

        log_refund_message(
            f"Refund request {refund.id} {decision} by {actor.role} {actor.id}",
            refund.order_id,
        )
        return refund
