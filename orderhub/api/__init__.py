# coding: utf8
from flask import Blueprint
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_restx import Api
from jwt.exceptions import PyJWTError

from orderhub.api.auth import ns as auth_ns
from orderhub.api.console import ns as console_ns
from orderhub.api.order import ns as order_ns
from orderhub.api.payment import ns as payment_ns
from orderhub.api.promotion import ns as promotion_ns
from orderhub.api.refund import ns as refund_ns
from orderhub.errors.exceptions import ApiException
from orderhub.errors.handler import api_error_handler

bp = Blueprint("api", __name__, url_prefix="/api/v1")

api = Api(
    bp,
    version="1.0",
    title="Orderhub API",
    description="Order lifecycle and payment API",
    doc="/docs/",
)


@api.errorhandler(ApiException)
def handle_api_exception(error):
    return api_error_handler(error)


@api.errorhandler(JWTExtendedException)
@api.errorhandler(PyJWTError)
def handle_jwt_error(error):
    return {
        "code": 401,
        "message": str(error) or "Unauthorized",
        "data": {"error": "UNAUTHORIZED"},
    }, 401


api.add_namespace(ns=auth_ns)
api.add_namespace(ns=promotion_ns)
api.add_namespace(ns=order_ns)
api.add_namespace(ns=payment_ns)
api.add_namespace(ns=refund_ns)
api.add_namespace(ns=console_ns)
