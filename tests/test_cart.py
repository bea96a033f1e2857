import pytest

from orderhub.client.cart import CartAggregate
from orderhub.errors.exceptions import BadRequest, EmptyCart, MissingStore


def test_totals_follow_items_fee_and_discount():
    cart = CartAggregate(store_id="store-1", delivery_fee=5000)
    cart.add_item("ca-phe-sua", 45000, quantity=2, name="Cà phê sữa")

    assert cart.totals == {
        "subtotal": 90000,
        "discount_amount": 0,
        "delivery_fee": 5000,
        "total": 95000,
    }

    cart.apply_promo("GIAM10", 9000)
    assert cart.totals["total"] == 86000


def test_same_product_and_options_are_merged():
    cart = CartAggregate(store_id="store-1")
    cart.add_item("tra-sua", 30000, selected_options={"size": "M"})
    cart.add_item("tra-sua", 30000, quantity=2, selected_options={"size": "M"})
    cart.add_item("tra-sua", 35000, selected_options={"size": "L"})

    assert [item["quantity"] for item in cart.items] == [3, 1]


def test_quantity_zero_removes_line_and_empty_cart_drops_promo():
    cart = CartAggregate(store_id="store-1")
    cart.add_item("tra-sua", 30000)
    cart.apply_promo("GIAM10", 3000)

    cart.update_quantity(0, 0)

    assert cart.is_empty
    assert cart.promo_code is None
    assert cart.totals["total"] == 0


def test_checkout_needs_items_and_store():
    with pytest.raises(EmptyCart):
        CartAggregate(store_id="store-1").checkout_payload()

    cart = CartAggregate()
    cart.add_item("tra-sua", 30000)
    with pytest.raises(MissingStore):
        cart.checkout_payload()


def test_cart_holds_a_single_store():
    cart = CartAggregate()
    cart.add_item("tra-sua", 30000, store_id="store-1")

    with pytest.raises(BadRequest):
        cart.add_item("banh-mi", 20000, store_id="store-2")


def test_destroyed_cart_rejects_changes():
    cart = CartAggregate(store_id="store-1")
    cart.add_item("tra-sua", 30000)

    cart.destroy()

    assert cart.is_empty
    with pytest.raises(BadRequest):
        cart.add_item("tra-sua", 30000)


def test_checkout_key_is_stable_until_cleared():
    cart = CartAggregate(store_id="store-1")
    cart.add_item("tra-dao", 35000)

    key = cart.checkout_key
    cart.update_quantity(0, 3)
    assert cart.checkout_key == key

    cart.clear()
    assert cart.checkout_key != key
