from typing import Type, Any, Optional, List, Dict
from sqlalchemy import select, func, update
from sqlalchemy.orm import DeclarativeMeta
from sqlalchemy.exc import SQLAlchemyError
from orderhub.extensions import db
from orderhub.lib.logger import logger


def select_with_pagination(
    model: Type[DeclarativeMeta],
    page: int,
    per_page: int,
    filters: Optional[List[Any]] = None,
    order_by: Optional[List[Any]] = None,
    eager_opts: Optional[List[Any]] = None,
) -> Dict[str, Any]:
    page = max(int(page or 1), 1)
    per_page = max(int(per_page or 1), 1)
    try:
        stmt = select(model)
        if filters:
            for cond in filters:
                stmt = stmt.where(cond)
        if eager_opts:
            stmt = stmt.options(*eager_opts)
        if order_by:
            stmt = stmt.order_by(*order_by)

        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = db.session.execute(count_stmt).scalar_one()

        items = (
            db.session.execute(stmt.offset((page - 1) * per_page).limit(per_page))
            .scalars()
            .all()
        )

        total_pages = (total + per_page - 1) // per_page

        return {
            "total": total,
            "page": page,
            "per_page": per_page,
            "pages": total_pages,
            "items": items,
        }
    except SQLAlchemyError as e:
        logger.error(f"Database error in select_with_pagination: {e}")
        db.session.rollback()
        raise


def update_where(
    model: Type[DeclarativeMeta],
    filters: List[Any],
    data: Dict[str, Any],
) -> int:
    """Conditional UPDATE committed on its own; returns the matched row count.

    Callers express the expected current state in ``filters`` so a row that
    changed in the meantime is simply not matched.
    """
    try:
        stmt = (
            update(model)
            .where(*filters)
            .values(**data)
            .execution_options(synchronize_session=False)
        )
        result = db.session.execute(stmt)
        db.session.commit()
        return result.rowcount
    except SQLAlchemyError as e:
        logger.error(f"Database error in update_where: {e}")
        db.session.rollback()
        raise
