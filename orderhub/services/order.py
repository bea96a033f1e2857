from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

import const
from orderhub.enums.order import UserRole
from orderhub.enums.payment import PaymentMethod, PaymentState
from orderhub.errors.exceptions import (
    AlreadyAssigned,
    BadRequest,
    DuplicateSubmission,
    EmptyCart,
    InvalidTransition,
    MissingProfile,
    MissingStore,
    NotFound,
    PaymentNotConfirmed,
    PermissionDenied,
)
from orderhub.extensions import db, redis_client
from orderhub.lib import lifecycle
from orderhub.lib.logger import log_order_message, logger
from orderhub.lib.query import update_where
from orderhub.lib.string import generate_order_number, is_blank
from orderhub.models.order import Order, OrderItem
from orderhub.services.payment_gateway import PaymentGatewayService
from orderhub.services.promotion import PromotionService

STORE_ROLES = (UserRole.STAFF.value, UserRole.ADMIN.value)


class OrderService:

    @staticmethod
    def find_order(id):
        return db.session.get(Order, id)

    @staticmethod
    def find_order_by_number(order_number):
        return Order.query.filter(Order.order_number == order_number).first()

    @staticmethod
    def get_order(order_id):
        order = OrderService.find_order(order_id)
        if not order:
            raise NotFound(message=f"Order {order_id} not found")
        return order

    @staticmethod
    def can_view(order, user):
        if user.role in STORE_ROLES:
            return True
        if user.role == UserRole.CUSTOMER.value:
            return order.customer_id == user.id
        if user.role == UserRole.SHIPPER.value:
            if order.shipper_id is None:
                return order.status == lifecycle.READY
            return order.shipper_id == user.id
        return False

    @staticmethod
    def get_order_for_user(order_id, user):
        order = OrderService.get_order(order_id)
        if not OrderService.can_view(order, user):
            raise PermissionDenied(message="You cannot access this order")
        return order

    @staticmethod
    def create_order(
        customer,
        delivery_address,
        phone,
        payment_method,
        store_id,
        items,
        promo_code=None,
        idempotency_key=None,
    ):
        lifecycle.check_create(customer.role)

        if not items:
            raise EmptyCart()
        if is_blank(store_id):
            raise MissingStore()
        delivery_address = delivery_address or customer.address
        phone = phone or customer.phone
        if is_blank(delivery_address) or is_blank(phone):
            raise MissingProfile()
        if payment_method not in [method.value for method in PaymentMethod]:
            raise BadRequest(message=f"Unsupported payment method: {payment_method}")

        subtotal = lifecycle.compute_totals(items)["subtotal"]
        discount = PromotionService.calculate_discount(promo_code, subtotal)
        totals = lifecycle.compute_totals(
            items,
            delivery_fee=current_app.config["DEFAULT_DELIVERY_FEE"],
            discount_amount=discount,
        )

        lock_key = OrderService._reserve_checkout(customer.id, idempotency_key)
        try:
            order = OrderService._insert_order(
                customer=customer,
                store_id=str(store_id).strip(),
                delivery_address=delivery_address.strip(),
                phone=phone.strip(),
                payment_method=payment_method,
                items=items,
                totals=totals,
                promo_code=promo_code.strip() if promo_code and discount else None,
                idempotency_key=idempotency_key,
            )
        except Exception:
            if lock_key:
                redis_client.delete(lock_key)
            raise

        if lock_key:
            redis_client.set(
                lock_key,
                order.id,
                ex=current_app.config["CHECKOUT_IDEMPOTENCY_WINDOW"],
            )

        log_order_message(
            f"Created order {order.order_number} total={order.total} "
            f"method={order.payment_method} payment_state={order.payment_state}",
            order.id,
        )
        return order

    @staticmethod
    def _reserve_checkout(customer_id, idempotency_key):
        """Hold the checkout key for the idempotency window; a repeat is rejected."""
        if not idempotency_key:
            return None
        lock_key = const.REDIS_KEY_ORDERHUB["checkout_lock"].format(
            customer_id=customer_id, key=idempotency_key
        )
        window = current_app.config["CHECKOUT_IDEMPOTENCY_WINDOW"]
        if redis_client.set(lock_key, "in_flight", nx=True, ex=window):
            return lock_key

        held = redis_client.get(lock_key)
        held = held.decode("utf-8") if isinstance(held, bytes) else held
        data = {"order_id": int(held)} if held and held.isdigit() else {}
        logger.warning(f"Duplicate checkout {idempotency_key} for customer {customer_id}")
        raise DuplicateSubmission(data=data)

    @staticmethod
    def _insert_order(
        customer,
        store_id,
        delivery_address,
        phone,
        payment_method,
        items,
        totals,
        promo_code,
        idempotency_key,
    ):
        for _ in range(const.ORDER_NUMBER_MAX_RETRIES):
            order = Order(
                order_number=generate_order_number(),
                store_id=store_id,
                customer_id=customer.id,
                delivery_address=delivery_address,
                phone=phone,
                payment_method=payment_method,
                payment_state=PaymentGatewayService.initial_payment_state(
                    payment_method
                ),
                promo_code=promo_code,
                idempotency_key=idempotency_key,
                status=lifecycle.PENDING,
                **totals,
            )
            for position, item in enumerate(items):
                order.items.append(
                    OrderItem(
                        position=position,
                        product_ref=str(item.get("product_ref") or item.get("product_id")),
                        name=item.get("name") or "",
                        quantity=item.get("quantity", item.get("qty")),
                        unit_price=int(item.get("unit_price", item.get("price"))),
                        selected_options=item.get("selected_options") or {},
                    )
                )
            try:
                return order.save()
            except IntegrityError:
                db.session.rollback()
                if idempotency_key and Order.query.filter(
                    Order.customer_id == customer.id,
                    Order.idempotency_key == idempotency_key,
                ).first():
                    raise DuplicateSubmission()
                logger.warning("Order number collision, generating a new one")
        raise BadRequest(message="Could not allocate an order number")

    @staticmethod
    def update_status(order_id, actor, new_status, cancel_reason=None):
        if (
            new_status == lifecycle.DELIVERING
            and actor.role == UserRole.SHIPPER.value
        ):
            return OrderService.accept_delivery(order_id, actor)

        order = OrderService.get_order_for_user(order_id, actor)
        current = order.status

        try:
            lifecycle.check_transition(current, new_status, actor.role, cancel_reason)
        except (InvalidTransition, PermissionDenied) as e:
            logger.warning(
                f"Rejected transition {current} -> {new_status} "
                f"on order {order.id} by {actor.role} {actor.id}: {e.message}"
            )
            raise

        if (
            current == lifecycle.PENDING
            and new_status == lifecycle.PROCESSING
            and order.payment_method == PaymentMethod.QR_TRANSFER.value
            and order.payment_state != PaymentState.CONFIRMED.value
        ):
            raise PaymentNotConfirmed()

        if new_status == lifecycle.COMPLETED and order.shipper_id != actor.id:
            raise PermissionDenied(message="Only the assigned shipper can complete it")

        now = datetime.now()
        data = {"status": new_status}
        if new_status == lifecycle.CANCELLED:
            data["cancel_reason"] = cancel_reason.strip()
            data["cancelled_at"] = now
        elif new_status == lifecycle.COMPLETED:
            data["completed_at"] = now

        rows = update_where(
            Order, [Order.id == order.id, Order.status == current], data
        )
        db.session.expire_all()
        order = OrderService.get_order(order_id)
        if rows == 0:
            raise InvalidTransition(
                message=f"Order status changed to {order.status} in the meantime"
            )

        log_order_message(
            f"Order {order.order_number}: {current} -> {new_status} "
            f"by {actor.role} {actor.id}",
            order.id,
        )
        return order

    @staticmethod
    def accept_delivery(order_id, shipper):
        if shipper.role != UserRole.SHIPPER.value:
            raise PermissionDenied(message="Only shippers can accept deliveries")

        order = OrderService.get_order(order_id)
        if order.shipper_id is not None and order.status in (
            lifecycle.READY,
            lifecycle.DELIVERING,
        ):
            raise AlreadyAssigned()
        lifecycle.check_transition(order.status, lifecycle.DELIVERING, shipper.role)

        rows = update_where(
            Order,
            [
                Order.id == order.id,
                Order.status == lifecycle.READY,
                Order.shipper_id.is_(None),
            ],
            {
                "status": lifecycle.DELIVERING,
                "shipper_id": shipper.id,
                "accepted_at": datetime.now(),
            },
        )
        db.session.expire_all()
        order = OrderService.get_order(order_id)
        if rows == 0:
            if order.shipper_id is not None:
                raise AlreadyAssigned()
            raise InvalidTransition(
                message=f"Order status changed to {order.status} in the meantime"
            )

        log_order_message(
            f"Order {order.order_number} accepted by shipper {shipper.id}", order.id
        )
        return order
