# coding: utf8


class ApiException(Exception):
    status_code = 500
    error_code = "INTERNAL_ERROR"
    message = "Internal Server Error"

    def __init__(self, message=None, status_code=None, error_code=None, data=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.extra = data or {}

    def to_dict(self):
        data = dict(self.extra)
        data["error"] = self.error_code
        return {"code": self.status_code, "message": self.message, "data": data}


# ------------------------- validation -------------------------


class BadRequest(ApiException):
    status_code = 400
    error_code = "BAD_REQUEST"
    message = "Bad request"


class Unauthorized(ApiException):
    status_code = 401
    error_code = "UNAUTHORIZED"
    message = "Unauthorized"


class PermissionDenied(ApiException):
    status_code = 403
    error_code = "PERMISSION_DENIED"
    message = "You are not allowed to perform this action"


class NotFound(ApiException):
    status_code = 404
    error_code = "NOT_FOUND"
    message = "Resource not found"


class EmptyCart(BadRequest):
    status_code = 422
    error_code = "EMPTY_CART"
    message = "Cart is empty"


class MissingStore(BadRequest):
    status_code = 422
    error_code = "MISSING_STORE"
    message = "Store is required"


class MissingProfile(BadRequest):
    status_code = 422
    error_code = "MISSING_PROFILE"
    message = "Delivery address and phone are required"


class IncompleteRefundSubmission(BadRequest):
    status_code = 422
    error_code = "INCOMPLETE_REFUND_SUBMISSION"
    message = "Reason, evidence image and evidence video are required"


class InvalidTransition(BadRequest):
    status_code = 422
    error_code = "INVALID_TRANSITION"
    message = "Invalid status transition"


# ------------------------- contention -------------------------


class Conflict(ApiException):
    status_code = 409
    error_code = "CONFLICT"
    message = "Conflict"


class AlreadyAssigned(Conflict):
    error_code = "ALREADY_ASSIGNED"
    message = "Order has already been accepted by another shipper"


class DuplicateSubmission(Conflict):
    error_code = "DUPLICATE_SUBMISSION"
    message = "The same request is already being processed"


class RefundNotAllowed(Conflict):
    error_code = "REFUND_NOT_ALLOWED"
    message = "Refund request is not allowed for this order"


class PaymentNotConfirmed(Conflict):
    error_code = "PAYMENT_NOT_CONFIRMED"
    message = "Payment for this order has not been confirmed"


# ------------------------- client side -------------------------


class SessionExpired(Unauthorized):
    error_code = "SESSION_EXPIRED"
    message = "Session expired, please log in again"


class TransportError(ApiException):
    status_code = 503
    error_code = "TRANSPORT_ERROR"
    message = "Network error"


ERRORS_BY_CODE = {
    klass.error_code: klass
    for klass in (
        BadRequest,
        Unauthorized,
        PermissionDenied,
        NotFound,
        EmptyCart,
        MissingStore,
        MissingProfile,
        IncompleteRefundSubmission,
        InvalidTransition,
        Conflict,
        AlreadyAssigned,
        DuplicateSubmission,
        RefundNotAllowed,
        PaymentNotConfirmed,
        SessionExpired,
        TransportError,
    )
}


def exception_from_payload(status_code, payload):
    """Rebuild the matching exception from an error envelope."""
    payload = payload if isinstance(payload, dict) else {}
    data = payload.get("data") or {}
    error_code = data.get("error") if isinstance(data, dict) else None
    klass = ERRORS_BY_CODE.get(error_code)
    message = payload.get("message") or None
    if klass is None:
        return ApiException(
            message=message, status_code=status_code, error_code=error_code
        )
    return klass(message=message)
