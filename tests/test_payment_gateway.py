import pytest

from orderhub.errors.exceptions import BadRequest, InvalidTransition
from orderhub.services.payment_gateway import PaymentGatewayService

WEBHOOK_HEADERS = {"X-API-KEY": "test-webhook-key"}


def _confirm(client, order, amount=None, headers=WEBHOOK_HEADERS):
    body = {"order_number": order.order_number}
    if amount is not None:
        body["amount"] = amount
    return client.post("/api/v1/payment/confirm", json=body, headers=headers)


def test_qr_payload_for_owner(client, customer, other_customer, place_order, headers):
    order = place_order(customer, payment_method="qr_transfer")

    own = client.get(f"/api/v1/payment/{order.id}/qr", headers=headers(customer))
    other = client.get(f"/api/v1/payment/{order.id}/qr", headers=headers(other_customer))

    assert own.status_code == 200
    payload = own.get_json()["data"]
    assert payload["bank_id"] == "VCB"
    assert payload["account_name"] == "ORDERHUB TEST"
    assert payload["amount"] == order.total
    assert payload["memo"] == order.order_number
    assert payload["qr_code_url"].startswith(
        "https://img.vietqr.io/image/VCB-19036735544018-compact2.png?"
    )
    assert other.status_code == 403


def test_cash_order_has_no_qr(client, customer, place_order, headers):
    order = place_order(customer)

    response = client.get(f"/api/v1/payment/{order.id}/qr", headers=headers(customer))

    assert response.status_code == 400


def test_timeout_never_moves_the_order(client, customer, place_order, headers):
    order = place_order(customer, payment_method="qr_transfer")

    first = client.post(f"/api/v1/payment/{order.id}/timeout", headers=headers(customer))
    again = client.post(f"/api/v1/payment/{order.id}/timeout", headers=headers(customer))

    for response in (first, again):
        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["status"] == "pending"
        assert data["payment_state"] == "timed_out"


def test_bank_confirmation_moves_order_to_processing(client, customer, place_order):
    order = place_order(customer, payment_method="qr_transfer")

    response = _confirm(client, order, amount=order.total)
    repeated = _confirm(client, order, amount=order.total)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["status"] == "processing"
    assert data["payment_state"] == "confirmed"
    assert data["paid_at"] is not None
    assert repeated.status_code == 200
    assert repeated.get_json()["data"]["status"] == "processing"


def test_confirmation_requires_webhook_key(client, customer, place_order):
    order = place_order(customer, payment_method="qr_transfer")

    missing = _confirm(client, order, headers={})
    wrong = _confirm(client, order, headers={"X-API-KEY": "nope"})

    assert missing.status_code == 401
    assert wrong.status_code == 401


def test_late_confirmation_after_timeout(client, customer, place_order, headers):
    order = place_order(customer, payment_method="qr_transfer")
    client.post(f"/api/v1/payment/{order.id}/timeout", headers=headers(customer))

    response = _confirm(client, order)

    assert response.status_code == 200
    assert response.get_json()["data"]["status"] == "processing"


def test_amount_mismatch_is_rejected(app, customer, place_order):
    order = place_order(customer, payment_method="qr_transfer")

    with pytest.raises(BadRequest):
        PaymentGatewayService.confirm_payment(order.order_number, amount=order.total - 1)
    assert PaymentGatewayService.get_qr_payload(order.id, customer)[
        "payment_state"
    ] == "awaiting"


def test_confirmation_for_cancelled_order_is_rejected(app, customer, staff, place_order):
    from orderhub.services.order import OrderService

    order = place_order(customer, payment_method="qr_transfer")
    OrderService.update_status(order.id, staff, "cancelled", "Khách đổi ý")

    with pytest.raises(InvalidTransition):
        PaymentGatewayService.confirm_payment(order.order_number)


def test_abandon_and_retry(client, customer, place_order, headers):
    order = place_order(customer, payment_method="qr_transfer")

    abandoned = client.post(f"/api/v1/payment/{order.id}/abandon", headers=headers(customer))
    again = client.post(f"/api/v1/payment/{order.id}/abandon", headers=headers(customer))
    retried = client.post(f"/api/v1/payment/{order.id}/retry", headers=headers(customer))

    assert abandoned.get_json()["data"]["payment_state"] == "abandoned"
    assert abandoned.get_json()["data"]["status"] == "pending"
    assert again.status_code == 200
    assert retried.status_code == 200
    assert retried.get_json()["data"]["payment_state"] == "awaiting"
    assert retried.get_json()["data"]["memo"] == order.order_number


def test_retry_after_payment_is_rejected(client, customer, place_order, headers):
    order = place_order(customer, payment_method="qr_transfer")
    _confirm(client, order)

    response = client.post(f"/api/v1/payment/{order.id}/retry", headers=headers(customer))

    assert response.status_code == 422
    assert response.get_json()["data"]["error"] == "INVALID_TRANSITION"
