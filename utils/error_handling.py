"""
Error translation shared by the services: database failures become HTTP errors
with stable messages, upstream failures carry what the upstream returned
"""

import traceback
from contextlib import contextmanager
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from utils.structured_logging import get_logger, LogCategory

logger = get_logger("error_handling")


class UpstreamServiceError(Exception):
    """An external service (language model, code sandbox) failed or returned unusable content"""

    def __init__(self, message: str, raw_output: Optional[str] = None):
        super().__init__(message)
        self.raw_output = raw_output


def to_http_error(e: Exception, operation: str) -> HTTPException:
    """Map an exception raised during `operation` to the HTTPException the client sees"""
    if isinstance(e, IntegrityError):
        logger.warning(f"Integrity error during {operation}: {e.orig}", category=LogCategory.DATABASE)
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Data integrity constraint violated. This operation conflicts with existing data.",
        )
    if isinstance(e, SQLAlchemyError):
        logger.error(f"Database error during {operation}", category=LogCategory.DATABASE, exception=e)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database operation failed. Please try again later.",
        )

    logger.error(f"Unexpected error during {operation}", exception=e, extra={"traceback": traceback.format_exc()})
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Error")


@contextmanager
def transaction(db: Session, operation: str):
    """
    Unit of work for multi-row writes: commit when the block succeeds,
    roll back and raise the translated HTTPException when it or the commit fails.

    Usage:
        with transaction(db, "create assessment"):
            db.add(assessment)
            assessment.questions = questions
    """
    try:
        yield db
        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise to_http_error(e, operation) from e


def validate_resource_exists(resource: Any, resource_name: str, resource_id: Any, detail: Optional[str] = None) -> None:
    """
    Raise 404 when a lookup came back empty

    Args:
        resource: The resource object (None if not found)
        resource_name: Name used in the default "<name> not found" message
        resource_id: Identifier that was searched for, logged only
        detail: Message overriding the default
    """
    if not resource:
        logger.warning(f"{resource_name} not found: {resource_id}", category=LogCategory.DATABASE)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail or f"{resource_name} not found")
