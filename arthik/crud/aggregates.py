# arthik/crud/aggregates.py
"""
Query helpers shared by the expense, income and budget crud modules:
pagination, sorting and the grouped totals behind the stats endpoints.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import extract, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from arthik.utils.budgeting import MONTH_NAMES, percentage_of, trend_window_start
from arthik.utils.money import safe_float


def apply_sort(query, model, sort_by: Optional[str], sort_order: str, allowed: Sequence[str], default: str):
    column = getattr(model, sort_by if sort_by in allowed else default)
    return query.order_by(column.asc() if sort_order == "asc" else column.desc())


def date_conditions(column, start_date: Optional[datetime], end_date: Optional[datetime]) -> list:
    conditions = []
    if start_date is not None:
        conditions.append(column >= start_date)
    if end_date is not None:
        conditions.append(column <= end_date)
    return conditions


def amount_conditions(column, min_amount: Optional[float], max_amount: Optional[float]) -> list:
    conditions = []
    if min_amount is not None:
        conditions.append(column >= min_amount)
    if max_amount is not None:
        conditions.append(column <= max_amount)
    return conditions


def text_search(q: str, *columns):
    """Case-insensitive substring match on any of ``columns``."""
    pattern = f"%{q.strip()}%"
    return or_(*(column.ilike(pattern) for column in columns))


async def paginate(query, page: int, limit: int, db: AsyncSession) -> Tuple[List[Any], int]:
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    return list(result.scalars().all()), total


async def stats_overview(amount_column, conditions: list, db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(
            func.coalesce(func.sum(amount_column), 0.0),
            func.count(),
            func.avg(amount_column),
            func.min(amount_column),
            func.max(amount_column),
        ).where(*conditions)
    )
    total, count, average, minimum, maximum = result.one()
    return {
        "total_amount": safe_float(total),
        "count": count or 0,
        "average_amount": round(safe_float(average), 2),
        "min_amount": safe_float(minimum),
        "max_amount": safe_float(maximum),
    }


async def grouped_totals(group_column, amount_column, conditions: list, db: AsyncSession, key: str = "category") -> List[Dict[str, Any]]:
    """Per-group total, count, average and share of the grand total, largest first."""
    total_expr = func.sum(amount_column)
    result = await db.execute(
        select(group_column, total_expr, func.count(), func.avg(amount_column))
        .where(*conditions)
        .group_by(group_column)
        .order_by(total_expr.desc())
    )
    rows = result.all()
    grand_total = sum(safe_float(row[1]) for row in rows)

    return [
        {
            key: group,
            "total_amount": safe_float(total),
            "count": count,
            "average_amount": round(safe_float(average), 2),
            "percentage": percentage_of(safe_float(total), grand_total),
        }
        for group, total, count, average in rows
    ]


async def monthly_trends(date_column, amount_column, conditions: list, months: int, now: datetime, db: AsyncSession) -> List[Dict[str, Any]]:
    year = extract("year", date_column)
    month = extract("month", date_column)
    result = await db.execute(
        select(year, month, func.sum(amount_column), func.count())
        .where(*conditions, date_column >= trend_window_start(months, now))
        .group_by(year, month)
        .order_by(year, month)
    )
    return [
        {
            "year": int(y),
            "month": int(m),
            "month_name": MONTH_NAMES[int(m) - 1],
            "total_amount": safe_float(total),
            "count": count,
        }
        for y, m, total, count in result.all()
    ]


async def distinct_values(column, conditions: list, db: AsyncSession) -> List[Any]:
    result = await db.execute(select(column).where(*conditions).distinct().order_by(column))
    return list(result.scalars().all())
