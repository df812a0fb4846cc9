"""
Request parsing helpers shared by the route modules.
"""
from datetime import datetime

from flask import request, current_app
from sqlalchemy import Boolean

from gladgrade.utils.error_handler import BadRequestError


def parse_id(value, name='id'):
    """Parse a path or body identifier; non-numeric input is a 400."""
    if isinstance(value, bool):
        raise BadRequestError(f'Invalid {name}')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequestError(f'Invalid {name}')


def parse_optional_id(value, name='id'):
    if value is None or value == '':
        return None
    return parse_id(value, name)


def parse_bool(value, name='value'):
    """Accept JSON booleans and the strings true/false/1/0 from query strings."""
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ('true', '1', 'yes'):
        return True
    if text in ('false', '0', 'no'):
        return False
    raise BadRequestError(f'Invalid boolean for {name}')


def parse_datetime(value, name='date'):
    if value is None or value == '':
        return None
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).replace(tzinfo=None)
    except ValueError:
        raise BadRequestError(f'Invalid {name}')


def get_json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequestError('Request body must be a JSON object')
    return data


def require_fields(data, *fields):
    missing = [field for field in fields if data.get(field) in (None, '')]
    if missing:
        raise BadRequestError(f"Missing required fields: {', '.join(missing)}")


def get_page_args():
    """page/limit from the query string, with page >= 1 and 1 <= limit <= MAX_PAGE_SIZE."""
    default_limit = current_app.config.get('DEFAULT_PAGE_SIZE', 10)
    max_limit = current_app.config.get('MAX_PAGE_SIZE', 100)
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', default_limit, type=int)
    page = max(page or 1, 1)
    limit = min(max(limit or default_limit, 1), max_limit)
    return page, limit


def apply_updates(instance, data, field_map, converters=None):
    """Copy the request fields present in `data` onto `instance`.

    `field_map` maps request field names to model attribute names; fields not
    listed there are ignored. `converters` optionally maps a request field to
    a callable applied to its value. Values bound for Boolean columns without
    a converter go through parse_bool. Returns the attribute names that were set.
    """
    converters = converters or {}
    columns = instance.__table__.columns
    changed = []
    for field, attribute in field_map.items():
        if field not in data:
            continue
        value = data[field]
        if field in converters:
            value = converters[field](value)
        elif attribute in columns and isinstance(columns[attribute].type, Boolean):
            value = parse_bool(value, field)
        setattr(instance, attribute, value)
        changed.append(attribute)
    return changed
