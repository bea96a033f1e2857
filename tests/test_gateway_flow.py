import gevent

from orderhub.client.gateway import PaymentGatewayFlow


class FakeOrderClient:
    def __init__(self, states):
        self.states = list(states)
        self.reported = []

    def fetch_order(self, order_id):
        payment_state = self.states.pop(0) if len(self.states) > 1 else self.states[0]
        status = "processing" if payment_state == "confirmed" else "pending"
        return {"id": order_id, "status": status, "payment_state": payment_state}

    def report_payment_timeout(self, order_id):
        self.reported.append("timeout")
        return {"id": order_id, "status": "pending", "payment_state": "timed_out"}

    def abandon_payment(self, order_id):
        self.reported.append("abandon")
        return {"id": order_id, "status": "pending", "payment_state": "abandoned"}


def test_wait_window_expiry_is_timed_out_not_paid():
    client = FakeOrderClient(["awaiting"])
    flow = PaymentGatewayFlow(client, 1, wait_seconds=0.05, poll_interval=0.01)

    outcome = flow.run()

    assert outcome == "timed_out"
    assert client.reported == ["timeout"]
    assert flow.order["status"] == "pending"
    assert flow.order["status"] != "processing"


def test_bank_confirmation_wins():
    client = FakeOrderClient(["awaiting", "confirmed"])
    flow = PaymentGatewayFlow(client, 1, wait_seconds=1, poll_interval=0.01)

    outcome = flow.run()

    assert outcome == "confirmed"
    assert client.reported == []
    assert flow.order["status"] == "processing"


def test_cancel_abandons_the_payment():
    client = FakeOrderClient(["awaiting"])
    flow = PaymentGatewayFlow(client, 1, wait_seconds=1, poll_interval=0.01)

    job = gevent.spawn(flow.run)
    gevent.sleep(0.02)
    flow.cancel()
    flow.cancel()
    job.join()

    assert job.value == "abandoned"
    assert client.reported == ["abandon"]


class ConfirmedOnAbandonClient(FakeOrderClient):
    def abandon_payment(self, order_id):
        self.reported.append("abandon")
        return {"id": order_id, "status": "processing", "payment_state": "confirmed"}


def test_cancel_racing_a_bank_confirmation_reports_confirmed():
    client = ConfirmedOnAbandonClient(["awaiting"])
    flow = PaymentGatewayFlow(client, 1, wait_seconds=1, poll_interval=0.01)

    job = gevent.spawn(flow.run)
    gevent.sleep(0.02)
    flow.cancel()
    job.join()

    assert job.value == "confirmed"
    assert flow.outcome == "confirmed"
    assert client.reported == ["abandon"]
    assert flow.order["status"] == "processing"
