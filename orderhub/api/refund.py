# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters, roles_required
from orderhub.enums.messages import MessageSuccess
from orderhub.enums.order import UserRole
from orderhub.enums.payment import RefundStatus
from orderhub.lib.response import Response
from orderhub.services.refund import RefundService

ns = Namespace(name="refund", description="Refund API")


@ns.route("/<int:order_id>")
class APISubmitRefund(Resource):

    @roles_required(UserRole.CUSTOMER.value)
    @parameters(
        type="object",
        properties={
            "reason": {"type": ["string", "null"]},
            "note": {"type": ["string", "null"]},
            "evidence_image": {"type": ["string", "null"]},
            "evidence_video": {"type": ["string", "null"]},
        },
    )
    def post(self, args, order_id, current_user):
        refund = RefundService.submit_refund_request(
            order_id,
            current_user,
            reason=args.get("reason"),
            note=args.get("note"),
            evidence_image=args.get("evidence_image"),
            evidence_video=args.get("evidence_video"),
        )
        return Response(
            data=refund.to_dict(),
            message=MessageSuccess.SUBMIT_REFUND.value,
            status=201,
            code=201,
        ).to_dict()


@ns.route("/<int:refund_id>/resolve")
class APIResolveRefund(Resource):

    @roles_required(UserRole.STAFF.value, UserRole.ADMIN.value)
    @parameters(
        type="object",
        properties={
            "decision": {
                "type": "string",
                "enum": [RefundStatus.APPROVED.value, RefundStatus.REJECTED.value],
            },
            "admin_note": {"type": ["string", "null"]},
        },
        required=["decision"],
    )
    def put(self, args, refund_id, current_user):
        refund = RefundService.resolve_refund_request(
            refund_id,
            current_user,
            args.get("decision"),
            admin_note=args.get("admin_note"),
        )
        return Response(
            data=refund.to_dict(),
            message=MessageSuccess.RESOLVE_REFUND.value,
        ).to_dict()
