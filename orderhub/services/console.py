from datetime import datetime

from dateutil.relativedelta import MO, relativedelta
from sqlalchemy import func, select

import const
from orderhub.enums.order import HistoryBucket
from orderhub.enums.payment import RefundStatus
from orderhub.errors.exceptions import BadRequest
from orderhub.extensions import db
from orderhub.lib import lifecycle
from orderhub.lib.query import select_with_pagination
from orderhub.models.order import Order
from orderhub.models.refund import RefundRequest

REFUNDED = HistoryBucket.REFUNDED.value

BUCKET_STATUSES = {
    HistoryBucket.PREPARING.value: (
        lifecycle.PENDING,
        lifecycle.PROCESSING,
        lifecycle.PREPARING,
        lifecycle.READY,
    ),
    HistoryBucket.DELIVERING.value: (lifecycle.DELIVERING,),
    HistoryBucket.COMPLETED.value: (lifecycle.COMPLETED,),
    HistoryBucket.CANCELLED.value: (lifecycle.CANCELLED,),
}


def _clamp_page(page, per_page):
    page = max(int(page or const.DEFAULT_PAGE), 1)
    per_page = int(per_page or const.DEFAULT_PER_PAGE)
    per_page = min(max(per_page, 1), const.MAX_PER_PAGE)
    return page, per_page


def _serialize_page(result):
    result["items"] = [order.to_dict() for order in result["items"]]
    return result


class ConsoleService:
    """Read-only projections over orders for the role consoles."""

    @staticmethod
    def history_buckets(order):
        # "refunded" sits on top of the status bucket, it never replaces it
        buckets = [
            bucket
            for bucket, statuses in BUCKET_STATUSES.items()
            if order.status in statuses
        ]
        if order.has_refund:
            buckets.append(REFUNDED)
        return buckets

    @staticmethod
    def bucket_filter(bucket):
        if bucket == REFUNDED:
            return Order.refund_requests.any()
        statuses = BUCKET_STATUSES.get(bucket)
        if statuses is None:
            raise BadRequest(message=f"Unknown history bucket: {bucket}")
        return Order.status.in_(statuses)

    @staticmethod
    def window_start(window, now=None):
        now = now or datetime.now()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if window == "day":
            return today
        if window == "week":
            return today + relativedelta(weekday=MO(-1))
        if window == "month":
            return today + relativedelta(day=1)
        raise BadRequest(message=f"Unknown date window: {window}")

    @staticmethod
    def customer_history(customer_id, bucket, page=None, per_page=None):
        page, per_page = _clamp_page(page, per_page)
        result = select_with_pagination(
            Order,
            page,
            per_page,
            filters=[
                Order.customer_id == customer_id,
                ConsoleService.bucket_filter(bucket),
            ],
            order_by=[Order.id.desc()],
        )
        return _serialize_page(result)

    @staticmethod
    def _store_filters(status=None, window=None, store_id=None, now=None):
        filters = []
        if store_id:
            filters.append(Order.store_id == str(store_id))
        if window:
            filters.append(
                Order.created_at >= ConsoleService.window_start(window, now)
            )
        if status == REFUNDED:
            filters.append(Order.refund_requests.any())
        elif status:
            if status not in lifecycle.STATUSES:
                raise BadRequest(message=f"Unknown order status: {status}")
            filters.append(Order.status == status)
        return filters

    @staticmethod
    def dashboard(status=None, window=None, store_id=None, now=None):
        filters = ConsoleService._store_filters(status, window, store_id, now)

        rows = db.session.execute(
            select(Order.status, func.count(Order.id))
            .where(*filters)
            .group_by(Order.status)
        ).all()
        counts = {s: 0 for s in lifecycle.STATUSES}
        counts.update({row[0]: row[1] for row in rows})

        revenue = db.session.execute(
            select(func.coalesce(func.sum(Order.total), 0)).where(
                *filters, Order.status == lifecycle.COMPLETED
            )
        ).scalar_one()

        pending_refunds = db.session.execute(
            select(func.count(RefundRequest.id))
            .join(Order, RefundRequest.order_id == Order.id)
            .where(*filters, RefundRequest.status == RefundStatus.PENDING.value)
        ).scalar_one()

        return {
            "counts": counts,
            "total_orders": sum(counts.values()),
            "revenue": int(revenue or 0),
            "pending_refunds": pending_refunds,
            "window": window,
            "store_id": store_id,
        }

    @staticmethod
    def list_orders(
        status=None, window=None, store_id=None, page=None, per_page=None, now=None
    ):
        page, per_page = _clamp_page(page, per_page)
        result = select_with_pagination(
            Order,
            page,
            per_page,
            filters=ConsoleService._store_filters(status, window, store_id, now),
            order_by=[Order.id.desc()],
        )
        return _serialize_page(result)

    @staticmethod
    def shipper_queues(shipper_id):
        ready = (
            Order.query.filter(
                Order.status == lifecycle.READY, Order.shipper_id.is_(None)
            )
            .order_by(Order.id.asc())
            .all()
        )
        delivering = (
            Order.query.filter(
                Order.status == lifecycle.DELIVERING, Order.shipper_id == shipper_id
            )
            .order_by(Order.accepted_at.asc())
            .all()
        )
        return {
            "ready": [order.to_dict() for order in ready],
            "delivering": [order.to_dict() for order in delivering],
        }

    @staticmethod
    def shipper_history(shipper_id, window=None, page=None, limit=None, now=None):
        page, limit = _clamp_page(page, limit)
        filters = [
            Order.shipper_id == shipper_id,
            Order.status.in_(tuple(lifecycle.TERMINAL_STATUSES)),
        ]
        if window:
            filters.append(Order.updated_at >= ConsoleService.window_start(window, now))

        result = select_with_pagination(
            Order, page, limit, filters=filters, order_by=[Order.updated_at.desc()]
        )

        stats = dict(
            db.session.execute(
                select(Order.status, func.count(Order.id))
                .where(*filters)
                .group_by(Order.status)
            ).all()
        )
        earnings = db.session.execute(
            select(func.coalesce(func.sum(Order.delivery_fee), 0)).where(
                *filters, Order.status == lifecycle.COMPLETED
            )
        ).scalar_one()

        result = _serialize_page(result)
        result["stats"] = {
            "total_completed": stats.get(lifecycle.COMPLETED, 0),
            "total_cancelled": stats.get(lifecycle.CANCELLED, 0),
            "earnings": int(earnings or 0),
        }
        return result
