# coding: utf8
from flask_restx import Namespace, Resource

import const
from orderhub.decorators import parameters, roles_required
from orderhub.enums.order import HistoryBucket, UserRole
from orderhub.lib import lifecycle
from orderhub.lib.response import Response
from orderhub.services.console import ConsoleService

ns = Namespace(name="console", description="Role console API")

PAGE_PROPERTIES = {
    "page": {"type": "string", "pattern": "^[0-9]+$"},
    "per_page": {"type": "string", "pattern": "^[0-9]+$"},
}
WINDOW_PROPERTY = {"type": "string", "enum": list(const.DASHBOARD_WINDOWS)}
STORE_STATUS_PROPERTY = {
    "type": "string",
    "enum": list(lifecycle.STATUSES) + [HistoryBucket.REFUNDED.value],
}


@ns.route("/history")
class APICustomerHistory(Resource):

    @roles_required(UserRole.CUSTOMER.value)
    @parameters(
        type="object",
        properties={
            "bucket": {
                "type": "string",
                "enum": [bucket.value for bucket in HistoryBucket],
            },
            **PAGE_PROPERTIES,
        },
        required=["bucket"],
    )
    def get(self, args, current_user):
        result = ConsoleService.customer_history(
            current_user.id,
            args.get("bucket"),
            page=args.get("page"),
            per_page=args.get("per_page"),
        )
        return Response(data=result).to_dict()


@ns.route("/dashboard")
class APIDashboard(Resource):

    @roles_required(UserRole.STAFF.value, UserRole.ADMIN.value)
    @parameters(
        type="object",
        properties={
            "status": STORE_STATUS_PROPERTY,
            "window": WINDOW_PROPERTY,
            "store_id": {"type": "string"},
        },
    )
    def get(self, args, current_user):
        result = ConsoleService.dashboard(
            status=args.get("status"),
            window=args.get("window"),
            store_id=args.get("store_id"),
        )
        return Response(data=result).to_dict()


@ns.route("/orders")
class APIStoreOrders(Resource):

    @roles_required(UserRole.STAFF.value, UserRole.ADMIN.value)
    @parameters(
        type="object",
        properties={
            "status": STORE_STATUS_PROPERTY,
            "window": WINDOW_PROPERTY,
            "store_id": {"type": "string"},
            **PAGE_PROPERTIES,
        },
    )
    def get(self, args, current_user):
        result = ConsoleService.list_orders(
            status=args.get("status"),
            window=args.get("window"),
            store_id=args.get("store_id"),
            page=args.get("page"),
            per_page=args.get("per_page"),
        )
        return Response(data=result).to_dict()


@ns.route("/shipper")
class APIShipperQueues(Resource):

    @roles_required(UserRole.SHIPPER.value)
    def get(self, current_user):
        return Response(data=ConsoleService.shipper_queues(current_user.id)).to_dict()


@ns.route("/shipper/history")
class APIShipperHistory(Resource):

    @roles_required(UserRole.SHIPPER.value)
    @parameters(
        type="object",
        properties={
            "window": WINDOW_PROPERTY,
            "page": {"type": "string", "pattern": "^[0-9]+$"},
            "limit": {"type": "string", "pattern": "^[0-9]+$"},
        },
    )
    def get(self, args, current_user):
        result = ConsoleService.shipper_history(
            current_user.id,
            window=args.get("window"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return Response(data=result).to_dict()
