from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INTEGRITY_CONFLICT = "integrity_conflict"
    STORAGE_FAILURE = "storage_failure"


@dataclass(frozen=True)
class PharmacyError(Exception):
    message: str

    kind: ClassVar[ErrorKind] = ErrorKind.STORAGE_FAILURE

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationError(PharmacyError):
    kind: ClassVar[ErrorKind] = ErrorKind.VALIDATION


@dataclass(frozen=True)
class NotFound(PharmacyError):
    entity: str
    entity_id: int

    kind: ClassVar[ErrorKind] = ErrorKind.NOT_FOUND

    def __str__(self) -> str:
        return f"{self.entity}_not_found: id={self.entity_id} ({self.message})"


@dataclass(frozen=True)
class IntegrityConflict(PharmacyError):
    kind: ClassVar[ErrorKind] = ErrorKind.INTEGRITY_CONFLICT


@dataclass(frozen=True)
class InsufficientStock(IntegrityConflict):
    medicine_id: int
    requested: int
    available: int

    def __str__(self) -> str:
        return (
            f"insufficient_stock: medicine={self.medicine_id} "
            f"requested={self.requested} available={self.available} ({self.message})"
        )


@dataclass(frozen=True)
class StorageFailure(PharmacyError):
    kind: ClassVar[ErrorKind] = ErrorKind.STORAGE_FAILURE


@dataclass(frozen=True)
class OrderCreationFailed(PharmacyError):
    """The order was aborted and every change since it began was rolled back."""

    reason: PharmacyError
    medicine_id: int | None = None

    @property
    def kind(self) -> ErrorKind:  # type: ignore[override]
        return self.reason.kind

    def __str__(self) -> str:
        where = f" at medicine={self.medicine_id}" if self.medicine_id is not None else ""
        return f"order_aborted{where}: {self.reason} ({self.message})"
