"""
Paginated, filterable list queries.

A QueryFilter collects SQLAlchemy criteria once and is applied to both the
count query and the page query, so `total` always describes the same row set
as `data`.
"""
import math


class QueryFilter:
    """Accumulates filter criteria for a list query."""

    def __init__(self, *conditions):
        self.conditions = list(conditions)

    def add(self, condition):
        self.conditions.append(condition)
        return self

    def add_if(self, value, make_condition):
        """Add make_condition(value) unless value is None or an empty string."""
        if value is not None and value != '':
            self.conditions.append(make_condition(value))
        return self

    def apply(self, query):
        if self.conditions:
            return query.filter(*self.conditions)
        return query

    def __len__(self):
        return len(self.conditions)


def build_pagination(total, page, limit):
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        'total': total,
        'page': page,
        'limit': limit,
        'totalPages': total_pages,
        'hasNextPage': page < total_pages,
        'hasPrevPage': page > 1,
    }


def paginate_query(query, filters, page, limit, order_by=(), serializer=None):
    """Run the count and the page query over the same filtered base query.

    Returns {'data': [...], 'pagination': {...}}. `serializer` turns each row
    into a dict and defaults to the row's to_dict().
    """
    filtered = filters.apply(query) if filters is not None else query
    total = filtered.order_by(None).count()
    rows = (filtered.order_by(*order_by)
            .offset((page - 1) * limit)
            .limit(limit)
            .all())
    serialize = serializer or (lambda row: row.to_dict())
    return {
        'data': [serialize(row) for row in rows],
        'pagination': build_pagination(total, page, limit),
    }
