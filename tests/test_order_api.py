from types import SimpleNamespace

import pytest

from orderhub.errors.exceptions import AlreadyAssigned
from orderhub.extensions import db
from orderhub.lib.query import update_where
from orderhub.models.order import Order
from orderhub.services.order import OrderService

from conftest import ITEMS


def _checkout(client, headers, **overrides):
    body = {
        "store_id": "store-1",
        "payment_method": "cash_on_delivery",
        "items": ITEMS,
    }
    body.update(overrides)
    return client.post("/api/v1/order", json=body, headers=headers)


def _status(client, headers, order_id, status, cancel_reason=None):
    return client.put(
        f"/api/v1/order/{order_id}/status",
        json={"status": status, "cancel_reason": cancel_reason},
        headers=headers,
    )


def test_cash_on_delivery_order_has_no_gateway_state(client, customer, headers):
    response = _checkout(client, headers(customer))

    assert response.status_code == 201
    data = response.get_json()["data"]
    assert data["status"] == "pending"
    assert data["payment_state"] is None
    assert "payment" not in data
    assert data["subtotal"] == 90000
    assert data["delivery_fee"] == 10000
    assert data["total"] == 100000
    assert data["order_number"].startswith("ORD-")
    assert data["items"][0]["selected_options"] == {"size": "L", "sugar": "50%"}
    assert data["delivery_address"] == customer.address


def test_qr_order_starts_awaiting_payment(client, customer, headers):
    response = _checkout(client, headers(customer), payment_method="qr_transfer")

    assert response.status_code == 201
    data = response.get_json()["data"]
    assert data["status"] == "pending"
    assert data["payment_state"] == "awaiting"
    payment = data["payment"]
    assert payment["amount"] == data["total"]
    assert payment["memo"] == data["order_number"]
    assert "19036735544018" in payment["qr_code_url"]
    assert payment["wait_seconds"] == 30


def test_empty_cart_is_rejected(client, customer, headers):
    response = _checkout(client, headers(customer), items=[])

    assert response.status_code == 422
    assert response.get_json()["data"]["error"] == "EMPTY_CART"
    assert Order.query.count() == 0


def test_malformed_line_is_bad_request(client, customer, headers):
    zero = _checkout(client, headers(customer), items=[dict(ITEMS[0], quantity=0)])
    negative = _checkout(client, headers(customer), items=[dict(ITEMS[0], unit_price=-1)])

    for response in (zero, negative):
        assert response.status_code == 400
        assert response.get_json()["data"]["error"] == "BAD_REQUEST"
    assert Order.query.count() == 0


def test_missing_store_is_rejected(client, customer, headers):
    response = _checkout(client, headers(customer), store_id=None)

    assert response.status_code == 422
    assert response.get_json()["data"]["error"] == "MISSING_STORE"


def test_missing_profile_is_rejected(client, make_user, headers):
    customer = make_user("customer", address=None, phone=None)
    response = _checkout(client, headers(customer))

    assert response.status_code == 422
    assert response.get_json()["data"]["error"] == "MISSING_PROFILE"


def test_only_customers_place_orders(client, staff, headers):
    response = _checkout(client, headers(staff))

    assert response.status_code == 403
    assert response.get_json()["data"]["error"] == "PERMISSION_DENIED"


def test_missing_token_is_unauthorized(client):
    response = client.post("/api/v1/order", json={"payment_method": "qr_transfer"})

    assert response.status_code == 401
    assert response.get_json()["data"]["error"] == "UNAUTHORIZED"


def test_repeated_checkout_key_is_rejected(client, customer, headers):
    request_headers = dict(headers(customer))
    request_headers["Idempotency-Key"] = "checkout_abc123"

    first = client.post(
        "/api/v1/order",
        json={"store_id": "store-1", "payment_method": "cash_on_delivery", "items": ITEMS},
        headers=request_headers,
    )
    second = client.post(
        "/api/v1/order",
        json={"store_id": "store-1", "payment_method": "cash_on_delivery", "items": ITEMS},
        headers=request_headers,
    )

    assert first.status_code == 201
    assert second.status_code == 409
    body = second.get_json()
    assert body["data"]["error"] == "DUPLICATE_SUBMISSION"
    assert body["data"]["order_id"] == first.get_json()["data"]["id"]
    assert Order.query.count() == 1


def test_checkout_key_is_scoped_to_the_customer(client, customer, other_customer, headers):
    responses = []
    for user in (customer, other_customer):
        request_headers = dict(headers(user))
        request_headers["Idempotency-Key"] = "checkout_shared"
        responses.append(_checkout(client, request_headers))

    assert [r.status_code for r in responses] == [201, 201]
    assert Order.query.filter(Order.idempotency_key == "checkout_shared").count() == 2


def test_failed_checkout_releases_the_key(client, customer, headers):
    request_headers = dict(headers(customer))
    request_headers["Idempotency-Key"] = "checkout_retry"

    failed = client.post(
        "/api/v1/order",
        json={"payment_method": "cash_on_delivery", "items": ITEMS},
        headers=request_headers,
    )
    retried = client.post(
        "/api/v1/order",
        json={"store_id": "store-1", "payment_method": "cash_on_delivery", "items": ITEMS},
        headers=request_headers,
    )

    assert failed.status_code == 422
    assert retried.status_code == 201


def test_pending_to_completed_is_rejected(client, customer, staff, place_order, headers):
    order = place_order(customer)

    response = _status(client, headers(staff), order.id, "completed")

    assert response.status_code == 422
    assert response.get_json()["data"]["error"] == "INVALID_TRANSITION"
    db.session.expire_all()
    assert db.session.get(Order, order.id).status == "pending"


def test_cancel_requires_a_reason(client, customer, staff, place_order, headers):
    order = place_order(customer)

    rejected = _status(client, headers(staff), order.id, "cancelled", "  ")
    assert rejected.status_code == 422
    db.session.expire_all()
    assert db.session.get(Order, order.id).status == "pending"

    accepted = _status(client, headers(staff), order.id, "cancelled", "Hết nguyên liệu")
    assert accepted.status_code == 200
    data = accepted.get_json()["data"]
    assert data["status"] == "cancelled"
    assert data["cancel_reason"] == "Hết nguyên liệu"


def test_qr_order_needs_confirmed_payment_before_processing(
    client, customer, staff, place_order, headers
):
    order = place_order(customer, payment_method="qr_transfer")

    response = _status(client, headers(staff), order.id, "processing")

    assert response.status_code == 409
    assert response.get_json()["data"]["error"] == "PAYMENT_NOT_CONFIRMED"


def test_staff_walks_cod_order_to_ready(client, customer, staff, place_order, headers):
    order = place_order(customer)

    for status in ("processing", "preparing", "ready"):
        response = _status(client, headers(staff), order.id, status)
        assert response.status_code == 200
        assert response.get_json()["data"]["status"] == status


def test_second_shipper_cannot_take_claimed_order(
    client, customer, staff, shipper, shipper_b, place_order, advance, headers
):
    order = advance(place_order(customer), "ready", staff)

    first = client.post(f"/api/v1/order/{order.id}/accept", headers=headers(shipper))
    second = client.post(f"/api/v1/order/{order.id}/accept", headers=headers(shipper_b))
    via_status = _status(client, headers(shipper_b), order.id, "delivering")

    assert first.status_code == 200
    assert first.get_json()["data"]["status"] == "delivering"
    assert first.get_json()["data"]["shipper_id"] == shipper.id
    assert second.status_code == 409
    assert second.get_json()["data"]["error"] == "ALREADY_ASSIGNED"
    assert via_status.status_code == 409
    assert via_status.get_json()["data"]["error"] == "ALREADY_ASSIGNED"


def test_only_assigned_shipper_completes(
    client, customer, staff, shipper, shipper_b, place_order, advance, headers
):
    order = advance(place_order(customer), "delivering", staff, shipper)

    other = _status(client, headers(shipper_b), order.id, "completed")
    own = _status(client, headers(shipper), order.id, "completed")

    assert other.status_code == 403
    assert own.status_code == 200
    assert own.get_json()["data"]["status"] == "completed"
    assert own.get_json()["data"]["completed_at"] is not None


def test_shipper_cannot_cancel(client, customer, staff, shipper, place_order, advance, headers):
    order = advance(place_order(customer), "delivering", staff, shipper)

    response = _status(client, headers(shipper), order.id, "cancelled", "Khách không nghe máy")

    assert response.status_code == 403


def test_customer_sees_only_own_orders(
    client, customer, other_customer, place_order, headers
):
    order = place_order(customer)

    own = client.get(f"/api/v1/order/{order.id}", headers=headers(customer))
    other = client.get(f"/api/v1/order/{order.id}", headers=headers(other_customer))
    missing = client.get("/api/v1/order/9999", headers=headers(customer))

    assert own.status_code == 200
    assert own.get_json()["data"]["allowed_transitions"] == []
    assert other.status_code == 403
    assert missing.status_code == 404


def test_update_where_only_matches_expected_status(app, customer, place_order):
    order = place_order(customer)

    stale = update_where(
        Order,
        [Order.id == order.id, Order.status == "processing"],
        {"status": "preparing"},
    )
    fresh = update_where(
        Order,
        [Order.id == order.id, Order.status == "pending"],
        {"status": "processing"},
    )

    assert stale == 0
    assert fresh == 1
    db.session.expire_all()
    assert db.session.get(Order, order.id).status == "processing"


def test_accept_race_is_settled_by_compare_and_set(
    app, monkeypatch, customer, staff, shipper, shipper_b, place_order, advance
):
    order = advance(place_order(customer), "ready", staff)
    # shipper B read the order while it was still unclaimed
    stale = SimpleNamespace(id=order.id, status="ready", shipper_id=None)
    OrderService.accept_delivery(order.id, shipper)

    real_get_order = OrderService.get_order
    calls = []

    def get_order(order_id):
        calls.append(order_id)
        return stale if len(calls) == 1 else real_get_order(order_id)

    monkeypatch.setattr(OrderService, "get_order", staticmethod(get_order))

    with pytest.raises(AlreadyAssigned):
        OrderService.accept_delivery(order.id, shipper_b)
    db.session.expire_all()
    assert db.session.get(Order, order.id).shipper_id == shipper.id
