"""
Pagination Utility Module

page/limit query parameters in, {"page", "limit", "total", "pages"} out.
"""
from typing import Any, Dict, List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

MAX_PAGE_SIZE = 100


def pagination_meta(total: int, page: int, limit: int) -> Dict[str, int]:
    pages = (total + limit - 1) // limit if total > 0 else 1
    return {"page": page, "limit": limit, "total": total, "pages": pages}


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    limit: int = 10,
    count_query: Optional[Select] = None
) -> Dict[str, Any]:
    """
    Apply pagination to a SQLAlchemy query.

    Returns:
        {"items": [...rows], "pagination": {page, limit, total, pages}}
    """
    page = max(1, page)
    limit = max(1, min(MAX_PAGE_SIZE, limit))

    if count_query is None:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    items: List[Any] = list(result.unique().scalars().all())

    return {"items": items, "pagination": pagination_meta(total, page, limit)}
