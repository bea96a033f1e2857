from enum import Enum


class MessageSuccess(Enum):
    LOGIN = "Đăng nhập thành công."
    CREATE_ORDER = "Đặt hàng thành công."
    UPDATE_ORDER_STATUS = "Cập nhật trạng thái đơn hàng thành công."
    ACCEPT_DELIVERY = "Nhận đơn giao hàng thành công."
    PAYMENT_CONFIRMED = "Thanh toán đã được xác nhận."
    PAYMENT_TIMED_OUT = "Chưa nhận được thanh toán. Đơn hàng đang chờ đối soát."
    PAYMENT_ABANDONED = "Đã hủy màn hình thanh toán. Bạn có thể thanh toán lại."
    PAYMENT_RETRY = "Mã QR mới đã được tạo."
    SUBMIT_REFUND = "Đã gửi yêu cầu hoàn tiền."
    RESOLVE_REFUND = "Đã xử lý yêu cầu hoàn tiền."


class MessageError(Enum):

    INVALID_PROMOTION = {
        "message": "Mã giảm giá không hợp lệ.",
        "message_en": "Promotion code is not valid.",
    }

    PROMOTION_EXPIRED = {
        "message": "Mã giảm giá đã hết hạn.",
        "message_en": "Promotion code has expired.",
    }

    PROMOTION_MIN_ORDER = {
        "message": "Đơn hàng chưa đạt giá trị tối thiểu để dùng mã giảm giá.",
        "message_en": "Order does not reach the minimum value for this promotion.",
    }

    WRONG_CREDENTIALS = {
        "message": "Email hoặc mật khẩu không chính xác.",
        "message_en": "Email or password is incorrect.",
    }
