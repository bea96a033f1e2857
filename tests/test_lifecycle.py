import pytest

from orderhub.errors.exceptions import (
    BadRequest,
    EmptyCart,
    InvalidTransition,
    PermissionDenied,
)
from orderhub.lib import lifecycle

ROLES = ("customer", "staff", "admin", "shipper")


@pytest.mark.parametrize("current", lifecycle.STATUSES)
@pytest.mark.parametrize("target", lifecycle.STATUSES)
def test_pairs_outside_table_are_invalid_for_every_role(current, target):
    if (current, target) in lifecycle.TRANSITION_PERMISSIONS:
        return
    for role in ROLES:
        with pytest.raises(InvalidTransition):
            lifecycle.check_transition(current, target, role, cancel_reason="x")


def test_pending_to_completed_is_invalid():
    with pytest.raises(InvalidTransition):
        lifecycle.check_transition("pending", "completed", "staff")


def test_table_pairs_pass_for_allowed_roles_only():
    for (current, target), roles in lifecycle.TRANSITION_PERMISSIONS.items():
        for role in ROLES:
            if role in roles:
                lifecycle.check_transition(current, target, role, cancel_reason="hết hàng")
            else:
                with pytest.raises(PermissionDenied):
                    lifecycle.check_transition(
                        current, target, role, cancel_reason="hết hàng"
                    )


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_cancel_requires_reason(reason):
    with pytest.raises(InvalidTransition):
        lifecycle.check_transition("processing", "cancelled", "staff", reason)


def test_terminal_statuses_have_no_targets():
    assert lifecycle.allowed_targets("completed") == []
    assert lifecycle.allowed_targets("cancelled") == []
    assert lifecycle.is_terminal("completed")
    assert not lifecycle.is_terminal("delivering")


def test_allowed_targets_by_role():
    assert lifecycle.allowed_targets("ready", "shipper") == ["delivering"]
    assert sorted(lifecycle.allowed_targets("ready", "staff")) == ["cancelled"]
    assert lifecycle.allowed_targets("pending", "customer") == []


def test_only_customers_create_orders():
    lifecycle.check_create("customer")
    with pytest.raises(PermissionDenied):
        lifecycle.check_create("staff")


def test_totals_scenario():
    totals = lifecycle.compute_totals(
        [{"price": 45000, "qty": 2}], delivery_fee=5000, discount_amount=0
    )
    assert totals == {
        "subtotal": 90000,
        "discount_amount": 0,
        "delivery_fee": 5000,
        "total": 95000,
    }


def test_discount_is_clamped_to_keep_total_non_negative():
    totals = lifecycle.compute_totals(
        [{"unit_price": 20000, "quantity": 1}], delivery_fee=10000, discount_amount=50000
    )
    assert totals["discount_amount"] == 30000
    assert totals["total"] == 0
    assert (
        totals["total"]
        == totals["subtotal"] - totals["discount_amount"] + totals["delivery_fee"]
    )


def test_empty_items_raise_empty_cart():
    with pytest.raises(EmptyCart):
        lifecycle.compute_totals([])


@pytest.mark.parametrize(
    "item",
    [
        {"unit_price": 1000, "quantity": 0},
        {"unit_price": 1000, "quantity": 1.5},
        {"unit_price": -1, "quantity": 1},
        {"quantity": 1},
    ],
)
def test_bad_lines_are_rejected(item):
    with pytest.raises(BadRequest):
        lifecycle.compute_totals([item])
