# bookstore/utils/pagination.py
import math

from sqlalchemy import func, select
from sqlalchemy.orm import Session

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def apply_sort(stmt, model, sort_by: str | None, sort_order: str | None, allowed: tuple, default: str, default_order: str = "asc"):
    """
    Unknown sort fields silently fall back to the default one.
    """
    field = sort_by if sort_by in allowed else default
    column = getattr(model, field)
    order = (sort_order or default_order).lower()
    return stmt.order_by(column.desc() if order == "desc" else column.asc(), model.id.asc())


def paginate(db: Session, stmt, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT):
    """
    Returns (rows, pagination meta dict) for a select() statement.
    """
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_LIMIT)

    total = db.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar_one()

    rows = db.execute(stmt.offset((page - 1) * limit).limit(limit)).scalars().unique().all()

    total_pages = math.ceil(total / limit) if total else 0
    meta = {
        "current_page": page,
        "total_pages": total_pages,
        "total_items": total,
        "has_next": page < total_pages,
        "has_prev": page > 1,
        "page_size": limit,
    }
    return rows, meta
