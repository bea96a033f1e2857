"""
Order lifecycle rules shared by the order service and the client SDK.

The permission table below is the only place that says which actor may move
an order between two statuses. Both the server-side services and the
client-side fail-fast checks call ``check_transition``.
"""

from orderhub.enums.order import OrderStatus, UserRole
from orderhub.errors.exceptions import (
    BadRequest,
    EmptyCart,
    InvalidTransition,
    PermissionDenied,
)

PENDING = OrderStatus.PENDING.value
PROCESSING = OrderStatus.PROCESSING.value
PREPARING = OrderStatus.PREPARING.value
READY = OrderStatus.READY.value
DELIVERING = OrderStatus.DELIVERING.value
COMPLETED = OrderStatus.COMPLETED.value
CANCELLED = OrderStatus.CANCELLED.value

STATUSES = tuple(status.value for status in OrderStatus)
TERMINAL_STATUSES = frozenset({COMPLETED, CANCELLED})
NON_TERMINAL_STATUSES = tuple(s for s in STATUSES if s not in TERMINAL_STATUSES)

_STORE_OPERATORS = frozenset({UserRole.STAFF.value, UserRole.ADMIN.value})
_SHIPPERS = frozenset({UserRole.SHIPPER.value})

# (from, to) -> roles allowed to apply it
TRANSITION_PERMISSIONS = {
    (PENDING, PROCESSING): _STORE_OPERATORS,
    (PROCESSING, PREPARING): _STORE_OPERATORS,
    (PREPARING, READY): _STORE_OPERATORS,
    (READY, DELIVERING): _SHIPPERS,
    (DELIVERING, COMPLETED): _SHIPPERS,
}
TRANSITION_PERMISSIONS.update(
    {(status, CANCELLED): _STORE_OPERATORS for status in NON_TERMINAL_STATUSES}
)

CREATE_ROLES = frozenset({UserRole.CUSTOMER.value})


def _value(status):
    return status.value if isinstance(status, OrderStatus) else status


def is_terminal(status):
    return _value(status) in TERMINAL_STATUSES


def allowed_targets(status, role=None):
    """Statuses reachable from ``status``, optionally only those ``role`` may apply."""
    status = _value(status)
    return [
        target
        for (source, target), roles in TRANSITION_PERMISSIONS.items()
        if source == status and (role is None or role in roles)
    ]


def check_transition(current, target, role, cancel_reason=None):
    """Validate a status change without touching any order.

    Raises ``InvalidTransition`` for any pair outside the table or a cancel
    without a reason, ``PermissionDenied`` when the pair exists but ``role``
    may not apply it.
    """
    current = _value(current)
    target = _value(target)

    if current not in STATUSES or target not in STATUSES:
        raise InvalidTransition(message=f"Unknown status: {current} -> {target}")

    roles = TRANSITION_PERMISSIONS.get((current, target))
    if roles is None:
        raise InvalidTransition(
            message=f"Cannot change order status from {current} to {target}"
        )
    if role not in roles:
        raise PermissionDenied(
            message=f"Role {role} cannot change order status from {current} to {target}"
        )
    if target == CANCELLED and not (cancel_reason or "").strip():
        raise InvalidTransition(message="Cancel reason is required")


def check_create(role):
    if role not in CREATE_ROLES:
        raise PermissionDenied(message="Only customers can place orders")


def _line_value(item, *keys):
    for key in keys:
        if key in item and item[key] is not None:
            return item[key]
    return None


def compute_totals(items, delivery_fee=0, discount_amount=0):
    """Derive subtotal, discount, delivery fee and total from line items.

    The discount is clamped so ``total`` never drops below zero, which keeps
    ``total == subtotal - discount_amount + delivery_fee`` true for every
    returned value.
    """
    if not items:
        raise EmptyCart()

    subtotal = 0
    for item in items:
        quantity = _line_value(item, "quantity", "qty")
        unit_price = _line_value(item, "unit_price", "price")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise BadRequest(message="Item quantity must be an integer of at least 1")
        if unit_price is None or unit_price < 0:
            raise BadRequest(message="Item price must not be negative")
        subtotal += int(unit_price) * quantity

    delivery_fee = max(int(delivery_fee or 0), 0)
    discount_amount = min(max(int(discount_amount or 0), 0), subtotal + delivery_fee)

    return {
        "subtotal": subtotal,
        "discount_amount": discount_amount,
        "delivery_fee": delivery_fee,
        "total": subtotal - discount_amount + delivery_fee,
    }
