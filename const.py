# Pagination Defaults
DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100

USER_ACTIVE = 1
USER_BLOCKED = 0

# Money is integer VND
DEFAULT_DELIVERY_FEE = 10000

PAYMENT_WAIT_SECONDS = 30
PAYMENT_POLL_INTERVAL = 3
CHECKOUT_IDEMPOTENCY_WINDOW = 30

ORDER_NUMBER_PREFIX = "ORD"
ORDER_NUMBER_MAX_RETRIES = 5

REFUND_REASONS = {
    "wrong_item": "Sai món",
    "missing_item": "Thiếu món",
    "damaged": "Đồ uống bị đổ, hư hỏng",
    "poor_quality": "Chất lượng không đảm bảo",
    "late_delivery": "Giao hàng quá trễ",
    "other": "Lý do khác",
}

REFUND_LABELS = {
    "pending": "refund_requested",
    "approved": "refunded",
    "rejected": "refund_rejected",
}

DASHBOARD_WINDOWS = ("day", "week", "month")

REDIS_KEY_ORDERHUB = {
    "checkout_lock": "orderhub:checkout:{customer_id}:{key}",
}
