# app/utils/pagination.py
from fastapi import Query

from app.config.settings import settings


class PageParams:
    """Query parameters shared by every list endpoint"""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(settings.TASKS['default_page_size'], ge=1, le=settings.TASKS['max_page_size']),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def paginate(query, params: PageParams, order_by=None) -> dict:
    total = query.order_by(None).count()
    if order_by is not None:
        query = query.order_by(order_by)
    items = query.offset(params.offset).limit(params.limit).all()
    return {
        "data": items,
        "page": params.page,
        "limit": params.limit,
        "total": total,
    }
