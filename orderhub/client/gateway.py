import gevent
from gevent.event import AsyncResult

import const
from orderhub.enums.payment import PaymentState
from orderhub.errors.exceptions import TransportError
from orderhub.lib import lifecycle
from orderhub.lib.logger import log_client_message

CONFIRMED = PaymentState.CONFIRMED.value
TIMED_OUT = PaymentState.TIMED_OUT.value
ABANDONED = PaymentState.ABANDONED.value


class PaymentGatewayFlow:
    """QR payment screen: confirmation, wait-window expiry or user cancel.

    ``run`` blocks the calling greenlet until exactly one of the three
    outcomes wins. A poller greenlet watches the order for a bank
    confirmation, ``gevent.Timeout`` bounds the wait and ``cancel`` can be
    called from any other greenlet.
    """

    def __init__(
        self,
        client,
        order_id,
        wait_seconds=const.PAYMENT_WAIT_SECONDS,
        poll_interval=const.PAYMENT_POLL_INTERVAL,
    ):
        self.client = client
        self.order_id = order_id
        self.wait_seconds = wait_seconds
        self.poll_interval = poll_interval
        self.order = None
        self.outcome = None
        self._result = AsyncResult()

    def _settle(self, outcome):
        if not self._result.ready():
            self._result.set(outcome)

    def _poll(self):
        while not self._result.ready():
            gevent.sleep(self.poll_interval)
            try:
                order = self.client.fetch_order(self.order_id)
            except TransportError as e:
                log_client_message(f"Polling order {self.order_id} failed: {e}")
                continue

            self.order = order
            if order.get("payment_state") == CONFIRMED:
                self._settle(CONFIRMED)
            elif order.get("status") == lifecycle.CANCELLED:
                log_client_message(f"Order {self.order_id} cancelled while paying")
                self._settle(ABANDONED)

    def cancel(self):
        self._settle(ABANDONED)

    def run(self):
        poller = gevent.spawn(self._poll)
        timeout = gevent.Timeout(self.wait_seconds)
        timeout.start()
        try:
            outcome = self._result.get()
        except gevent.Timeout as t:
            if t is not timeout:
                raise
            self._settle(TIMED_OUT)
            outcome = self._result.get()
        finally:
            timeout.cancel()
            poller.kill()

        if outcome == TIMED_OUT:
            self.order = self.client.report_payment_timeout(self.order_id)
        elif outcome == ABANDONED:
            if not self.order or self.order.get("status") == lifecycle.PENDING:
                self.order = self.client.abandon_payment(self.order_id)

        # Bank confirmation may land at the deadline or while cancelling
        if outcome != CONFIRMED and (self.order or {}).get("payment_state") == CONFIRMED:
            outcome = CONFIRMED

        self.outcome = outcome
        log_client_message(f"Payment flow for order {self.order_id}: {outcome}")
        return outcome
