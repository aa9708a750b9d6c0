"""Service layer: membership, reconciliation, expense storage, balances, users and groups.

Services take plain values (ids, drafts) and return ORM objects or raise
`ServiceError` subclasses. They never import request or response helpers.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from .. import db
from ..errors import PersistenceError

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
@contextmanager
def atomic(action: str):
    """Run the block in one transaction: commit on success, roll back on any failure.

    Storage failures are re-raised as PersistenceError; service errors raised
    inside the block propagate unchanged after the rollback.
    """
    try:
        yield db.session
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("%s failed, transaction rolled back", action)
        raise PersistenceError(f"{action} failed") from exc
    except Exception:
        db.session.rollback()
        raise
