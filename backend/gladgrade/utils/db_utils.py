"""
Transaction scope for multi-statement writes.

    with transaction() as session:
        session.add(parent)
        session.flush()
        session.add(child)

Commits when the block exits normally; on any exception rolls back every
write in the block and re-raises.
"""
from contextlib import contextmanager
import logging

from gladgrade import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction():
    session = db.session
    try:
        yield session
        session.commit()
    except Exception:
        logger.warning("Transaction rolled back", exc_info=True)
        session.rollback()
        raise
