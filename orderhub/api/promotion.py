# coding: utf8
from flask_restx import Namespace, Resource

from orderhub.decorators import parameters, roles_required
from orderhub.enums.order import UserRole
from orderhub.lib.response import Response
from orderhub.services.promotion import PromotionService

ns = Namespace(name="promotion", description="Promotion API")


@ns.route("/<string:code>")
class APICheckPromotion(Resource):

    @roles_required(UserRole.CUSTOMER.value)
    @parameters(
        type="object",
        properties={
            "subtotal": {"type": "string", "pattern": "^[0-9]+$"},
        },
        required=["subtotal"],
    )
    def get(self, args, code, current_user):
        subtotal = int(args.get("subtotal"))
        discount = PromotionService.calculate_discount(code, subtotal)
        return Response(
            data={
                "code": code.strip(),
                "subtotal": subtotal,
                "discount_amount": discount,
            },
        ).to_dict()
