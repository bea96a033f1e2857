# coding: utf8
from flask import request
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters, roles_required
from orderhub.enums.messages import MessageSuccess
from orderhub.enums.order import UserRole
from orderhub.enums.payment import PaymentMethod
from orderhub.lib import lifecycle
from orderhub.lib.response import Response
from orderhub.services.order import OrderService
from orderhub.services.payment_gateway import PaymentGatewayService

ns = Namespace(name="order", description="Order API")


@ns.route("")
class APICreateOrder(Resource):

    @roles_required(UserRole.CUSTOMER.value)
    @parameters(
        type="object",
        properties={
            "store_id": {"type": ["string", "integer", "null"]},
            "delivery_address": {"type": ["string", "null"]},
            "phone": {"type": ["string", "null"]},
            "payment_method": {
                "type": "string",
                "enum": [method.value for method in PaymentMethod],
            },
            "promo_code": {"type": ["string", "null"]},
            "idempotency_key": {"type": ["string", "null"], "maxLength": 100},
            "items": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "product_ref": {"type": ["string", "integer"]},
                        "name": {"type": "string"},
                        "quantity": {"type": "integer"},
                        "unit_price": {"type": "integer"},
                        "selected_options": {"type": "object"},
                    },
                    "required": ["product_ref", "quantity", "unit_price"],
                },
            },
        },
        required=["payment_method"],
    )
    def post(self, args, current_user):
        idempotency_key = request.headers.get("Idempotency-Key") or args.get(
            "idempotency_key"
        )
        order = OrderService.create_order(
            customer=current_user,
            delivery_address=args.get("delivery_address"),
            phone=args.get("phone"),
            payment_method=args.get("payment_method"),
            store_id=args.get("store_id"),
            items=args.get("items") or [],
            promo_code=args.get("promo_code"),
            idempotency_key=idempotency_key,
        )

        data = order.to_dict()
        if order.payment_method == PaymentMethod.QR_TRANSFER.value:
            data["payment"] = PaymentGatewayService.build_qr_payload(order)
        return Response(
            data=data,
            message=MessageSuccess.CREATE_ORDER.value,
            status=201,
            code=201,
        ).to_dict()


@ns.route("/<int:order_id>")
class APIOrderDetail(Resource):

    @roles_required()
    def get(self, order_id, current_user):
        order = OrderService.get_order_for_user(order_id, current_user)
        data = order.to_dict()
        data["allowed_transitions"] = lifecycle.allowed_targets(
            order.status, current_user.role
        )
        return Response(data=data).to_dict()


@ns.route("/<int:order_id>/status")
class APIUpdateOrderStatus(Resource):

    @roles_required(
        UserRole.STAFF.value, UserRole.ADMIN.value, UserRole.SHIPPER.value
    )
    @parameters(
        type="object",
        properties={
            "status": {"type": "string", "enum": list(lifecycle.STATUSES)},
            "cancel_reason": {"type": ["string", "null"]},
        },
        required=["status"],
    )
    def put(self, args, order_id, current_user):
        order = OrderService.update_status(
            order_id,
            current_user,
            args.get("status"),
            cancel_reason=args.get("cancel_reason"),
        )
        return Response(
            data=order.to_dict(),
            message=MessageSuccess.UPDATE_ORDER_STATUS.value,
        ).to_dict()


@ns.route("/<int:order_id>/accept")
class APIAcceptDelivery(Resource):

    @roles_required(UserRole.SHIPPER.value)
    def post(self, order_id, current_user):
        order = OrderService.accept_delivery(order_id, current_user)
        return Response(
            data=order.to_dict(),
            message=MessageSuccess.ACCEPT_DELIVERY.value,
        ).to_dict()
