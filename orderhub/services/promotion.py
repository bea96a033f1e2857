from datetime import datetime

from orderhub.enums.messages import MessageError
from orderhub.errors.exceptions import BadRequest
from orderhub.models.promotion import Promotion


class PromotionService:

    @staticmethod
    def create_promotion(*args, **kwargs):
        promotion = Promotion(*args, **kwargs)
        promotion.save()
        return promotion

    @staticmethod
    def find_promotion_by_code(code, now=None):
        promotion = Promotion.query.filter(Promotion.code == code).first()
        if not promotion:
            return "not_exist"
        if not promotion.is_active:
            return "not_active"
        if promotion.is_expired(now or datetime.now()):
            return "expired"
        return promotion

    @staticmethod
    def calculate_discount(code, subtotal, now=None):
        """Discount granted by ``code`` on ``subtotal``; 0 when no code is given."""
        if not code:
            return 0
        promotion = PromotionService.find_promotion_by_code(code.strip(), now)
        if promotion in ("not_exist", "not_active"):
            raise BadRequest(**_message(MessageError.INVALID_PROMOTION))
        if promotion == "expired":
            raise BadRequest(**_message(MessageError.PROMOTION_EXPIRED))
        if subtotal < (promotion.min_order or 0):
            raise BadRequest(**_message(MessageError.PROMOTION_MIN_ORDER))
        return promotion.calculate_discount(subtotal)


def _message(error):
    return {
        "message": error.value["message"],
        "data": {"message_en": error.value["message_en"]},
    }
