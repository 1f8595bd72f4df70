"""Domain errors and storage error translation.

Stores raise these instead of SQLAlchemy exceptions, and the app's exception
handlers turn them into error envelopes. Each error carries the business code
it maps to.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession

from linkshelf.schemas.envelope import BizCode

logger = structlog.get_logger()


class LinkshelfError(Exception):
    """Base class for all errors surfaced to API clients."""

    biz_code: BizCode = BizCode.SERVER_ERROR

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.biz_code.message
        super().__init__(self.message)


class NotFound(LinkshelfError):
    """No row for the given id or unique key."""

    biz_code = BizCode.NOT_FOUND

    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key!r} not found")


class ConstraintViolation(LinkshelfError):
    """Duplicate unique key or broken foreign key."""

    biz_code = BizCode.BAD_REQUEST


class StorageUnavailable(LinkshelfError):
    """Connection, pool or lock contention failure."""

    biz_code = BizCode.SERVER_ERROR


class Unauthorized(LinkshelfError):
    biz_code = BizCode.UNAUTHORIZED


class Forbidden(LinkshelfError):
    biz_code = BizCode.FORBIDDEN


class ValidationError(LinkshelfError):
    biz_code = BizCode.BAD_REQUEST


@asynccontextmanager
async def storage_errors(db: AsyncSession) -> AsyncIterator[None]:
    """Roll back and translate SQLAlchemy failures into domain errors."""
    try:
        yield
    except sa_exc.IntegrityError as e:
        await db.rollback()
        logger.info("storage.constraint_violation", error=str(e.orig))
        raise ConstraintViolation(_constraint_message(e)) from e
    except (sa_exc.TimeoutError, sa_exc.OperationalError) as e:
        await db.rollback()
        logger.warning("storage.unavailable", error=str(e))
        raise StorageUnavailable("Storage is busy, try again later") from e
    except sa_exc.SQLAlchemyError as e:
        await db.rollback()
        logger.error("storage.error", error=str(e))
        raise StorageUnavailable() from e


def _constraint_message(e: sa_exc.IntegrityError) -> str:
    detail = str(e.orig).lower()
    if "unique" in detail:
        return "Value already taken"
    if "foreign key" in detail:
        return "Referenced record does not exist"
    return "Constraint violated"
