import itertools
import os

os.environ["FLASK_CONFIG"] = "testing"

import fakeredis  # noqa: E402
import pytest  # noqa: E402

from orderhub import create_app  # noqa: E402
from orderhub.config import TestingConfig  # noqa: E402
from orderhub.enums.order import UserRole  # noqa: E402
from orderhub.enums.payment import PaymentMethod  # noqa: E402
from orderhub.extensions import db, redis_client  # noqa: E402
from orderhub.lib import lifecycle  # noqa: E402
from orderhub.services.auth import AuthService  # noqa: E402
from orderhub.services.order import OrderService  # noqa: E402
from orderhub.services.payment_gateway import PaymentGatewayService  # noqa: E402

ITEMS = [
    {
        "product_ref": "tra-sua-tran-chau",
        "name": "Trà sữa trân châu",
        "quantity": 2,
        "unit_price": 45000,
        "selected_options": {"size": "L", "sugar": "50%"},
    }
]


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    redis_client._redis_client = fakeredis.FakeStrictRedis()
    redis_client.flushall()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make_user(role=UserRole.CUSTOMER.value, **kwargs):
        n = next(counter)
        kwargs.setdefault("phone", "0901234567")
        kwargs.setdefault("address", "12 Nguyễn Huệ, Quận 1, TP.HCM")
        return AuthService.register(
            email=f"{role}{n}@orderhub.test",
            password="secret123",
            name=f"{role} {n}",
            role=role,
            **kwargs,
        )

    return _make_user


@pytest.fixture
def customer(make_user):
    return make_user(UserRole.CUSTOMER.value)


@pytest.fixture
def other_customer(make_user):
    return make_user(UserRole.CUSTOMER.value)


@pytest.fixture
def staff(make_user):
    return make_user(UserRole.STAFF.value, store_id="store-1")


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN.value)


@pytest.fixture
def shipper(make_user):
    return make_user(UserRole.SHIPPER.value)


@pytest.fixture
def shipper_b(make_user):
    return make_user(UserRole.SHIPPER.value)


def auth_headers(user):
    token = AuthService.generate_token(user)["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers


@pytest.fixture
def place_order(app):
    def _place_order(customer, payment_method=PaymentMethod.CASH_ON_DELIVERY.value):
        return OrderService.create_order(
            customer=customer,
            delivery_address=None,
            phone=None,
            payment_method=payment_method,
            store_id="store-1",
            items=[dict(item) for item in ITEMS],
        )

    return _place_order


@pytest.fixture
def advance(app):
    """Walk an order forward through the normal happy path up to ``target``."""

    def _advance(order, target, staff, shipper=None):
        if order.payment_method == PaymentMethod.QR_TRANSFER.value:
            PaymentGatewayService.confirm_payment(order.order_number)
        path = [
            lifecycle.PROCESSING,
            lifecycle.PREPARING,
            lifecycle.READY,
            lifecycle.DELIVERING,
            lifecycle.COMPLETED,
        ]
        order = OrderService.get_order(order.id)
        for status in path:
            if order.status == target:
                break
            if status == lifecycle.PROCESSING and order.status == lifecycle.PROCESSING:
                continue
            actor = shipper if status in (lifecycle.DELIVERING, lifecycle.COMPLETED) else staff
            order = OrderService.update_status(order.id, actor, status)
        return order

    return _advance
