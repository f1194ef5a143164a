from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError

from movies_api.core.exceptions import StorageFailureException

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise driver/SQL errors as an opaque `StorageFailureException`.

    Only `SQLAlchemyError` is translated; cancellation and programming errors
    propagate untouched.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Storage failure during %s", operation)
        raise StorageFailureException(operation=operation) from exc


__all__ = ["storage_errors"]
