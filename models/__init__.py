import logging
from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

from errors import InternalError, VaultError

logger = logging.getLogger(__name__)

db = SQLAlchemy()


@contextmanager
def transaction():
    """Commit everything added inside the block once, or nothing at all."""
    try:
        yield db.session
        db.session.commit()
    except VaultError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception('transaction rolled back')
        raise InternalError() from exc
