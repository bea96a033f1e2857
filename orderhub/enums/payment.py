from enum import Enum


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    QR_TRANSFER = "qr_transfer"


class PaymentState(Enum):
    # Gateway sub-state, only used by QR_TRANSFER orders
    AWAITING = "awaiting"  # QR đang hiển thị, chờ ngân hàng xác nhận
    CONFIRMED = "confirmed"  # Đã nhận tiền
    TIMED_OUT = "timed_out"  # Hết thời gian chờ, cần đối soát
    ABANDONED = "abandoned"  # Khách đóng màn hình thanh toán


class RefundStatus(Enum):
    PENDING = "pending"  # Đang yêu cầu hoàn tiền
    APPROVED = "approved"  # Đã hoàn tiền
    REJECTED = "rejected"  # Đã từ chối hoàn tiền


class RefundReason(Enum):
    WRONG_ITEM = "wrong_item"
    MISSING_ITEM = "missing_item"
    DAMAGED = "damaged"
    POOR_QUALITY = "poor_quality"
    LATE_DELIVERY = "late_delivery"
    OTHER = "other"
