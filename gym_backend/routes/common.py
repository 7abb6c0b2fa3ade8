import logging
from contextlib import contextmanager

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


@contextmanager
def database_guard(db: Session):
    """Roll back and report a 503 when the database fails underneath a route."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Database operation failed.')
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def id_mismatch() -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='ID mismatch.')
