from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.accounts.core.errors import ConflictError, StoreFailure


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy errors as ``ConflictError`` or ``StoreFailure``.

    Place it outside ``session_scope()`` so the rollback has already happened.
    """
    try:
        yield
    except IntegrityError as e:
        logger.info("{} hit a unique constraint", operation)
        raise ConflictError(
            f"{operation} violates a uniqueness rule",
            {"constraint": str(e.orig)},
        ) from e
    except SQLAlchemyError as e:
        logger.error("{} failed in the store: {}", operation, type(e).__name__)
        raise StoreFailure(f"{operation} failed: {type(e).__name__}") from e
