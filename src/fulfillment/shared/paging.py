"""Read every row matching a DAO query, page by page.

Protean's ``QuerySet.all()`` caps results at the provider's default limit, so
unbounded listings go through ``fetch_all``. Pages are ordered by id so that
offsets stay stable across pages on SQL providers.
"""

PAGE_SIZE = 500


def fetch_all(query, page_size: int = PAGE_SIZE) -> list:
    results = []
    offset = 0
    query = query.order_by("id")
    while True:
        page = query.offset(offset).limit(page_size).all().items
        results.extend(page)
        if len(page) < page_size:
            return results
        offset += page_size
