"""
Pagination Utility Module

Provides standardized pagination helpers for all list endpoints. Every list
response carries a `pagination` block of the form
{current, total, count, limit, totalItems}.
"""
from typing import List, Any, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from mosqueconnect.schemas.common import PaginationInfo


def build_pagination(page: int, limit: int, total_items: int, count: int) -> PaginationInfo:
    """
    Build the pagination block.

    Args:
        page: Current page number (1-indexed)
        limit: Items per page
        total_items: Number of matching rows before pagination
        count: Number of rows returned on this page
    """
    total_pages = (total_items + limit - 1) // limit if total_items > 0 else 1
    return PaginationInfo(
        current=page,
        total=total_pages,
        count=count,
        limit=limit,
        total_items=total_items,
    )


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Any], PaginationInfo]:
    """
    Apply pagination to a SQLAlchemy query.

    The total is counted over the filtered query before offset/limit are applied.

    Returns:
        (items, pagination)
    """
    page = max(1, page)
    limit = max(1, min(100, limit))  # Cap at 100 items per page

    count_stmt = select(func.count()).select_from(query.order_by(None).subquery())
    total_items = await db.scalar(count_stmt) or 0

    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    items = list(result.scalars().all())

    return items, build_pagination(page, limit, total_items, len(items))


def paginate_list(items: List[Any], page: int = 1, limit: int = 10) -> Tuple[List[Any], PaginationInfo]:
    """Paginate an already materialized list (e.g. merged activity timelines)"""
    page = max(1, page)
    limit = max(1, min(100, limit))
    start = (page - 1) * limit
    chunk = items[start:start + limit]
    return chunk, build_pagination(page, limit, len(items), len(chunk))
