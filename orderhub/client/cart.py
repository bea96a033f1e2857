import const
from orderhub.errors.exceptions import BadRequest, EmptyCart, MissingStore
from orderhub.lib import lifecycle
from orderhub.lib.string import generate_idempotency_key, is_blank


class CartAggregate:
    """Pre-order cart held by one client session, never persisted.

    Totals are derived on every read with the same ``compute_totals`` the
    server applies when the order is created.
    """

    def __init__(self, store_id=None, delivery_fee=const.DEFAULT_DELIVERY_FEE):
        self.store_id = store_id
        self.delivery_fee = delivery_fee
        self.items = []
        self.promo_code = None
        self.discount_amount = 0
        self.destroyed = False
        self._checkout_key = None

    def _ensure_alive(self):
        if self.destroyed:
            raise BadRequest(message="Cart has already been checked out")

    def add_item(
        self,
        product_ref,
        unit_price,
        quantity=1,
        name="",
        selected_options=None,
        store_id=None,
    ):
        self._ensure_alive()
        if store_id is not None:
            if self.items and self.store_id not in (None, store_id):
                raise BadRequest(message="Cart already holds items of another store")
            self.store_id = store_id
        if not isinstance(quantity, int) or quantity < 1:
            raise BadRequest(message="Item quantity must be an integer of at least 1")

        selected_options = selected_options or {}
        for item in self.items:
            if (
                item["product_ref"] == product_ref
                and item["selected_options"] == selected_options
            ):
                item["quantity"] += quantity
                return item

        item = {
            "product_ref": product_ref,
            "name": name,
            "quantity": quantity,
            "unit_price": unit_price,
            "selected_options": selected_options,
        }
        self.items.append(item)
        return item

    def update_quantity(self, index, quantity):
        self._ensure_alive()
        if quantity <= 0:
            return self.remove_item(index)
        self.items[index]["quantity"] = quantity
        return self.items[index]

    def remove_item(self, index):
        self._ensure_alive()
        item = self.items.pop(index)
        if not self.items:
            self.remove_promo()
        return item

    def apply_promo(self, code, discount_amount):
        self._ensure_alive()
        self.promo_code = code
        self.discount_amount = discount_amount

    def remove_promo(self):
        self.promo_code = None
        self.discount_amount = 0

    def clear(self):
        self.items = []
        self.remove_promo()
        self._checkout_key = None

    def destroy(self):
        self.clear()
        self.destroyed = True

    @property
    def checkout_key(self):
        """Idempotency key of the pending checkout, stable across retries."""
        if self._checkout_key is None:
            self._checkout_key = generate_idempotency_key()
        return self._checkout_key

    @property
    def is_empty(self):
        return not self.items

    @property
    def totals(self):
        if not self.items:
            return {
                "subtotal": 0,
                "discount_amount": 0,
                "delivery_fee": 0,
                "total": 0,
            }
        return lifecycle.compute_totals(
            self.items,
            delivery_fee=self.delivery_fee,
            discount_amount=self.discount_amount,
        )

    def checkout_payload(self):
        self._ensure_alive()
        if not self.items:
            raise EmptyCart()
        if self.store_id is None or is_blank(str(self.store_id)):
            raise MissingStore()
        return {
            "store_id": self.store_id,
            "items": [dict(item) for item in self.items],
            "promo_code": self.promo_code,
        }

    def snapshot(self):
        data = {
            "store_id": self.store_id,
            "items": [dict(item) for item in self.items],
            "promo_code": self.promo_code,
        }
        data.update(self.totals)
        return data
