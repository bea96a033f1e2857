import re
import uuid
from datetime import datetime

import const


def generate_order_number(now=None):
    now = now or datetime.now()
    raw_id = f"{const.ORDER_NUMBER_PREFIX}-{now.strftime('%y%m%d')}-{uuid.uuid4().hex[:6]}"
    return re.sub(r"[^a-zA-Z0-9_-]", "", raw_id).upper()


def generate_idempotency_key(tag="checkout"):
    return f"{tag}_{uuid.uuid4().hex}"


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())
