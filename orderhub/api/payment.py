# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters, require_api_key, roles_required
from orderhub.enums.messages import MessageSuccess
from orderhub.enums.order import UserRole
from orderhub.lib.response import Response
from orderhub.services.payment_gateway import PaymentGatewayService

ns = Namespace(name="payment", description="QR payment API")

CUSTOMER = UserRole.CUSTOMER.value


@ns.route("/<int:order_id>/qr")
class APIPaymentQr(Resource):

    @roles_required(CUSTOMER)
    def get(self, order_id, current_user):
        payload = PaymentGatewayService.get_qr_payload(order_id, current_user)
        return Response(data=payload).to_dict()


@ns.route("/<int:order_id>/timeout")
class APIPaymentTimeout(Resource):

    @roles_required(CUSTOMER)
    def post(self, order_id, current_user):
        order = PaymentGatewayService.mark_timed_out(order_id, current_user)
        return Response(
            data=order.to_dict(),
            message=MessageSuccess.PAYMENT_TIMED_OUT.value,
        ).to_dict()


@ns.route("/<int:order_id>/abandon")
class APIPaymentAbandon(Resource):

    @roles_required(CUSTOMER)
    def post(self, order_id, current_user):
        order = PaymentGatewayService.abandon(order_id, current_user)
        return Response(
            data=order.to_dict(),
            message=MessageSuccess.PAYMENT_ABANDONED.value,
        ).to_dict()


@ns.route("/<int:order_id>/retry")
class APIPaymentRetry(Resource):

    @roles_required(CUSTOMER)
    def post(self, order_id, current_user):
        payload = PaymentGatewayService.retry(order_id, current_user)
        return Response(
            data=payload,
            message=MessageSuccess.PAYMENT_RETRY.value,
        ).to_dict()


@ns.route("/confirm")
class APIPaymentConfirm(Resource):

    @require_api_key
    @parameters(
        type="object",
        properties={
            "order_number": {"type": "string"},
            "amount": {"type": ["integer", "null"]},
            "transaction_ref": {"type": ["string", "null"]},
        },
        required=["order_number"],
    )
    def post(self, args):
        order = PaymentGatewayService.confirm_payment(
            args.get("order_number").strip(), amount=args.get("amount")
        )
        return Response(
            data=order.to_dict(),
            message=MessageSuccess.PAYMENT_CONFIRMED.value,
        ).to_dict()
