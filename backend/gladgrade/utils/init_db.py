import logging

from gladgrade import db
from gladgrade.models import Role, ImageType, EnvironmentType, MessageCategory

logger = logging.getLogger(__name__)

ROLES = [
    ('Admin', 'Full administrative access'),
    ('Support', 'Customer support staff'),
    ('Moderator', 'Reviews and moderates user content'),
    ('Client', 'Business owner'),
    ('Client Admin', 'Administrator of a business account'),
    ('User', 'Registered consumer'),
    ('Guest', 'Anonymous guest consumer'),
]

IMAGE_TYPES = ['Rating', 'Review', 'Dorm', 'Profile', 'Business Logo', 'Ad']

ENVIRONMENT_TYPES = ['Consumer App', 'Client Portal', 'Admin Console']

MESSAGE_CATEGORIES = ['General', 'Support', 'Billing', 'Feedback', 'Report Abuse']


def _seed(model, column, values, build):
    existing = {getattr(row, column) for row in model.query.all()}
    added = 0
    for value in values:
        key = value[0] if isinstance(value, tuple) else value
        if key in existing:
            continue
        db.session.add(build(value))
        added += 1
    return added


def init_reference_data():
    """Insert the lookup rows the API depends on. Safe to run repeatedly."""
    added = _seed(Role, 'role', ROLES, lambda value: Role(role=value[0], description=value[1]))
    added += _seed(ImageType, 'image_type', IMAGE_TYPES, lambda value: ImageType(image_type=value))
    added += _seed(EnvironmentType, 'name', ENVIRONMENT_TYPES, lambda value: EnvironmentType(name=value))
    added += _seed(MessageCategory, 'name', MESSAGE_CATEGORIES, lambda value: MessageCategory(name=value))
    db.session.commit()
    logger.info(f"Reference data initialized, {added} rows added")
    return added
