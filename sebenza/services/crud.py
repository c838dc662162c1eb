"""Search / sort / paginate helpers shared by the plain CRUD routers."""
import math
from typing import Literal, Optional

from fastapi import HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Query as SAQuery


class PaginationParams(BaseModel):
    page: int = 1
    limit: int = 10
    search: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Literal["asc", "desc"] = "asc"


def pagination_params(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_order: Literal["asc", "desc"] = Query("asc"),
) -> PaginationParams:
    return PaginationParams(page=page, limit=limit, search=search, sort_by=sort_by, sort_order=sort_order)


def apply_search(q: SAQuery, search: Optional[str], *columns) -> SAQuery:
    if not search:
        return q
    pattern = f"%{search.lower()}%"
    return q.filter(or_(*[col.ilike(pattern) for col in columns]))


def apply_sort(q: SAQuery, model, sort_by: Optional[str], sort_order: str) -> SAQuery:
    if not sort_by:
        return q
    column = model.__table__.columns.get(sort_by)
    if column is None:
        raise HTTPException(status_code=400, detail=f"Cannot sort by '{sort_by}'")
    return q.order_by(column.desc() if sort_order == "desc" else column.asc())


def paginate(q: SAQuery, params: PaginationParams) -> tuple[list, dict]:
    total = q.count()
    items = q.offset((params.page - 1) * params.limit).limit(params.limit).all()
    pagination = {
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "total_pages": math.ceil(total / params.limit),
    }
    return items, pagination
