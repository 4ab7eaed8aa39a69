import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from matchday import db
from matchday.utils.exceptions import DependencyError

logger = logging.getLogger(__name__)


@contextmanager
def storage_access(operation):
    """
    Run a block of reads or writes against the prediction/fixture store.

    Any database failure rolls the session back and is re-raised as a
    retryable DependencyError, so callers never see a half-built result.
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Storage failure during {operation}: {e}")
        raise DependencyError(
            f"Prediction storage unavailable during {operation}"
        ) from e
