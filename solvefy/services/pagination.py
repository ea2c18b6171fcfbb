import math


def parse_page_args(args, default_limit, max_limit=100):
    """Read ``page`` / ``limit`` from request args.

    Non-numeric values fall back to the defaults; values below 1 are
    clamped to 1 and ``limit`` never exceeds ``max_limit``.
    """
    page = args.get('page', 1, type=int)
    limit = args.get('limit', default_limit, type=int)
    page = max(page, 1)
    limit = min(max(limit, 1), max_limit)
    return page, limit


def paginate(rows, page, limit):
    """Slice ``rows`` for one page. Returns (items, meta)."""
    total = len(rows)
    start = (page - 1) * limit
    items = rows[start:start + limit]
    return items, {
        'total': total,
        'page': page,
        'limit': limit,
        'totalPages': math.ceil(total / limit),
    }
