from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pharmacy.core.domain.model.errors import (
    IntegrityConflict,
    PharmacyError,
    StorageFailure,
)

log = logging.getLogger(__name__)


def storage_error(exc: SQLAlchemyError, action: str) -> PharmacyError:
    """Classify a driver error by kind so callers never parse SQL states."""
    if isinstance(exc, IntegrityError):
        log.info("%s rejected by a constraint: %s", action, exc.orig)
        return IntegrityConflict(
            message=f"{action}: rejected by a constraint or a missing reference"
        )

    log.error("%s failed", action, exc_info=exc)
    return StorageFailure(message=f"{action}: {type(exc).__name__}")
