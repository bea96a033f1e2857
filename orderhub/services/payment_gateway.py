from datetime import datetime
from urllib.parse import urlencode

from flask import current_app

from orderhub.enums.payment import PaymentMethod, PaymentState
from orderhub.errors.exceptions import (
    BadRequest,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)
from orderhub.extensions import db
from orderhub.lib import lifecycle
from orderhub.lib.logger import log_payment_message, logger
from orderhub.lib.query import update_where
from orderhub.models.order import Order

AWAITING = PaymentState.AWAITING.value
CONFIRMED = PaymentState.CONFIRMED.value
TIMED_OUT = PaymentState.TIMED_OUT.value
ABANDONED = PaymentState.ABANDONED.value


class PaymentGatewayService:
    """QR bank-transfer sub-flow gating a pending order.

    Cash on delivery orders never carry a payment state. QR orders start in
    ``awaiting``; only an explicit bank confirmation moves the order on to
    ``processing``. A client-side timeout lands in ``timed_out`` and waits for
    reconciliation.
    """

    @staticmethod
    def initial_payment_state(payment_method):
        if payment_method == PaymentMethod.QR_TRANSFER.value:
            return AWAITING
        return None

    @staticmethod
    def build_qr_payload(order):
        config = current_app.config
        query = urlencode(
            {
                "amount": order.total,
                "addInfo": order.order_number,
                "accountName": config["QR_ACCOUNT_NAME"],
            }
        )
        return {
            "order_id": order.id,
            "order_number": order.order_number,
            "bank_id": config["QR_BANK_ID"],
            "account_no": config["QR_ACCOUNT_NO"],
            "account_name": config["QR_ACCOUNT_NAME"],
            "amount": order.total,
            "memo": order.order_number,
            "qr_code_url": "{base}/{bank}-{account}-compact2.png?{query}".format(
                base=config["QR_IMAGE_BASE_URL"],
                bank=config["QR_BANK_ID"],
                account=config["QR_ACCOUNT_NO"],
                query=query,
            ),
            "payment_state": order.payment_state,
            "wait_seconds": config["PAYMENT_WAIT_SECONDS"],
        }

    @staticmethod
    def _get_qr_order(order_id, customer):
        order = db.session.get(Order, order_id)
        if not order:
            raise NotFound(message=f"Order {order_id} not found")
        if order.customer_id != customer.id:
            raise PermissionDenied(message="You cannot access this order")
        if order.payment_method != PaymentMethod.QR_TRANSFER.value:
            raise BadRequest(message="Order is not paid by QR transfer")
        return order

    @staticmethod
    def _move_state(order, from_states, to_state, extra=None):
        data = {"payment_state": to_state}
        data.update(extra or {})
        rows = update_where(
            Order,
            [
                Order.id == order.id,
                Order.status == lifecycle.PENDING,
                Order.payment_state.in_(from_states),
            ],
            data,
        )
        db.session.expire_all()
        return rows, db.session.get(Order, order.id)

    @staticmethod
    def get_qr_payload(order_id, customer):
        order = PaymentGatewayService._get_qr_order(order_id, customer)
        return PaymentGatewayService.build_qr_payload(order)

    @staticmethod
    def mark_timed_out(order_id, customer):
        """Wait window elapsed on the client. Never counts as payment."""
        order = PaymentGatewayService._get_qr_order(order_id, customer)
        rows, order = PaymentGatewayService._move_state(order, [AWAITING], TIMED_OUT)
        if rows:
            log_payment_message(
                f"Payment wait window expired for {order.order_number}, "
                "waiting for reconciliation",
                order.id,
            )
        return order

    @staticmethod
    def abandon(order_id, customer):
        """Gateway screen closed; the order itself stays pending."""
        order = PaymentGatewayService._get_qr_order(order_id, customer)
        rows, order = PaymentGatewayService._move_state(order, [AWAITING], ABANDONED)
        if rows:
            log_payment_message(
                f"Customer left the payment screen for {order.order_number}", order.id
            )
        return order

    @staticmethod
    def retry(order_id, customer):
        order = PaymentGatewayService._get_qr_order(order_id, customer)
        if order.status != lifecycle.PENDING:
            raise InvalidTransition(message=f"Order is already {order.status}")
        if order.payment_state == CONFIRMED:
            raise InvalidTransition(message="Order has already been paid")

        rows, order = PaymentGatewayService._move_state(
            order, [TIMED_OUT, ABANDONED], AWAITING
        )
        if rows:
            log_payment_message(f"Payment retried for {order.order_number}", order.id)
        elif order.status != lifecycle.PENDING or order.payment_state != AWAITING:
            raise InvalidTransition(
                message=f"Payment can no longer be retried ({order.status})"
            )
        return PaymentGatewayService.build_qr_payload(order)

    @staticmethod
    def confirm_payment(order_number, amount=None):
        """External bank confirmation for the order whose number is the memo."""
        order = Order.query.filter(Order.order_number == order_number).first()
        if not order:
            raise NotFound(message=f"Order {order_number} not found")
        if order.payment_method != PaymentMethod.QR_TRANSFER.value:
            raise BadRequest(message="Order is not paid by QR transfer")
        if order.payment_state == CONFIRMED:
            return order
        if amount is not None and int(amount) != order.total:
            logger.warning(
                f"Amount mismatch for {order.order_number}: "
                f"received {amount}, expected {order.total}"
            )
            raise BadRequest(message="Transferred amount does not match order total")
        if order.status != lifecycle.PENDING:
            logger.warning(
                f"Payment received for {order.order_number} in status {order.status}"
            )
            raise InvalidTransition(message=f"Order is already {order.status}")

        rows, order = PaymentGatewayService._move_state(
            order,
            [AWAITING, TIMED_OUT, ABANDONED],
            CONFIRMED,
            {"status": lifecycle.PROCESSING, "paid_at": datetime.now()},
        )
        if not rows and order.payment_state != CONFIRMED:
            raise InvalidTransition(message=f"Order is already {order.status}")

        log_payment_message(
            f"Payment confirmed for {order.order_number}: pending -> processing",
            order.id,
        )
        return order
