from gevent import sleep

from orderhub.client.session import unwrap
from orderhub.enums.payment import PaymentMethod
from orderhub.errors.exceptions import DuplicateSubmission, TransportError
from orderhub.lib import lifecycle
from orderhub.lib.logger import log_client_message


class OrderClient:
    """Order, payment, refund and console calls on top of a ``TokenSession``.

    Reads are retried on transport errors. Mutations are never retried; a
    second call with the same operation key while the first is outstanding
    raises ``DuplicateSubmission`` without reaching the network. Every
    mutation re-fetches the order so callers never act on a stale copy.
    """

    def __init__(self, session, read_retries=2, retry_backoff=0.2):
        self.session = session
        self.read_retries = read_retries
        self.retry_backoff = retry_backoff
        self._in_flight = set()

    def _read(self, path, params=None):
        attempt = 0
        while True:
            try:
                response = self.session.authorized_call("GET", path, params=params)
                return unwrap(response)
            except TransportError:
                if attempt >= self.read_retries:
                    raise
                attempt += 1
                log_client_message(f"Retrying GET {path} ({attempt})")
                sleep(self.retry_backoff * attempt)

    def _mutate(self, key, method, path, **kwargs):
        if key in self._in_flight:
            raise DuplicateSubmission()
        self._in_flight.add(key)
        try:
            return unwrap(self.session.authorized_call(method, path, **kwargs))
        finally:
            self._in_flight.discard(key)

    # ------------------------- orders -------------------------

    def create_order(
        self,
        cart,
        payment_method=PaymentMethod.CASH_ON_DELIVERY.value,
        delivery_address=None,
        phone=None,
        idempotency_key=None,
    ):
        payload = cart.checkout_payload()
        payload.update(
            {
                "payment_method": payment_method,
                "delivery_address": delivery_address,
                "phone": phone,
            }
        )
        idempotency_key = idempotency_key or cart.checkout_key

        created = self._mutate(
            "create_order",
            "POST",
            "/order",
            json=payload,
            headers={"Idempotency-Key": idempotency_key},
        )
        cart.destroy()

        order = self.fetch_order(created["id"])
        if created.get("payment"):
            order["payment"] = created["payment"]
        return order

    def fetch_order(self, order_id):
        return self._read(f"/order/{order_id}")

    def update_order_status(
        self, order_id, new_status, cancel_reason=None, current_status=None
    ):
        if current_status is not None and self.session.role:
            lifecycle.check_transition(
                current_status, new_status, self.session.role, cancel_reason
            )

        self._mutate(
            f"order_status:{order_id}",
            "PUT",
            f"/order/{order_id}/status",
            json={"status": new_status, "cancel_reason": cancel_reason},
        )
        return self.fetch_order(order_id)

    def accept_delivery(self, order_id):
        self._mutate(f"order_status:{order_id}", "POST", f"/order/{order_id}/accept")
        return self.fetch_order(order_id)

    def check_promotion(self, code, subtotal):
        return self._read(f"/promotion/{code}", params={"subtotal": str(subtotal)})

    # ------------------------- payment -------------------------

    def get_payment_qr(self, order_id):
        return self._read(f"/payment/{order_id}/qr")

    def report_payment_timeout(self, order_id):
        return self._mutate(
            f"payment:{order_id}", "POST", f"/payment/{order_id}/timeout"
        )

    def abandon_payment(self, order_id):
        return self._mutate(
            f"payment:{order_id}", "POST", f"/payment/{order_id}/abandon"
        )

    def retry_payment(self, order_id):
        return self._mutate(f"payment:{order_id}", "POST", f"/payment/{order_id}/retry")

    # ------------------------- refunds -------------------------

    def submit_refund_request(
        self, order_id, reason, note, evidence_image, evidence_video
    ):
        refund = self._mutate(
            f"refund:{order_id}",
            "POST",
            f"/refund/{order_id}",
            json={
                "reason": reason,
                "note": note,
                "evidence_image": evidence_image,
                "evidence_video": evidence_video,
            },
        )
        self.fetch_order(order_id)
        return refund

    def resolve_refund_request(self, refund_id, decision, admin_note=None):
        return self._mutate(
            f"refund_resolve:{refund_id}",
            "PUT",
            f"/refund/{refund_id}/resolve",
            json={"decision": decision, "admin_note": admin_note},
        )

    # ------------------------- consoles -------------------------

    def order_history(self, bucket, page=1, per_page=10):
        return self._read(
            "/console/history",
            params={"bucket": bucket, "page": str(page), "per_page": str(per_page)},
        )

    def dashboard(self, status=None, window=None, store_id=None):
        params = {"status": status, "window": window, "store_id": store_id}
        return self._read(
            "/console/dashboard", params={k: v for k, v in params.items() if v}
        )

    def store_orders(self, status=None, window=None, store_id=None, page=1, per_page=10):
        params = {
            "status": status,
            "window": window,
            "store_id": store_id,
            "page": str(page),
            "per_page": str(per_page),
        }
        return self._read(
            "/console/orders", params={k: v for k, v in params.items() if v}
        )

    def shipper_queues(self):
        return self._read("/console/shipper")

    def shipper_history(self, window=None, page=1, limit=10):
        params = {"window": window, "page": str(page), "limit": str(limit)}
        return self._read(
            "/console/shipper/history", params={k: v for k, v in params.items() if v}
        )
