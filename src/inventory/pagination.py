"""Page results for list endpoints."""

import math
from dataclasses import dataclass, field

from protean.exceptions import ValidationError

from inventory.settings import setting

_BATCH_SIZE = 500


@dataclass(frozen=True)
class Page:
    items: list = field(default_factory=list)
    page: int = 1
    limit: int = 20
    total: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    def to_dict(self, serialize=lambda item: item) -> dict:
        return {
            "data": [serialize(item) for item in self.items],
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "total_pages": self.total_pages,
            },
        }


def check_page(page, limit):
    """Validate page/limit and fill in the default limit."""
    if limit is None:
        limit = setting("DEFAULT_PAGE_LIMIT")
    max_limit = setting("MAX_PAGE_LIMIT")
    if page is None or page < 1:
        raise ValidationError({"page": ["Page must be at least 1"]})
    if limit < 1 or limit > max_limit:
        raise ValidationError({"limit": [f"Limit must be between 1 and {max_limit}"]})
    return page, limit


def paginate(query, page=1, limit=None) -> Page:
    """Fetch one page of a DAO query. The store applies offset and limit and counts the matches."""
    page, limit = check_page(page, limit)
    result = query.limit(limit).offset((page - 1) * limit).all()
    return Page(items=list(result.items), page=page, limit=limit, total=result.total)


def paginate_items(items: list, page=1, limit=None) -> Page:
    """Page a list that had to be filtered in memory."""
    page, limit = check_page(page, limit)
    start = (page - 1) * limit
    return Page(items=items[start : start + limit], page=page, limit=limit, total=len(items))


def iter_query(query, batch_size=_BATCH_SIZE):
    """Yield every match of ``query``, fetched in batches. ``query`` must be ordered."""
    offset = 0
    while True:
        batch = query.limit(batch_size).offset(offset).all().items
        yield from batch
        if len(batch) < batch_size:
            return
        offset += batch_size
