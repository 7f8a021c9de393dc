from __future__ import annotations

import logging

from returns.result import Failure, Result, Success
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from pharmacy.adapters.outbound.sql.clients import SqlClientRepository
from pharmacy.adapters.outbound.sql.errors import storage_error
from pharmacy.adapters.outbound.sql.medicines import SqlMedicineRepository
from pharmacy.adapters.outbound.sql.orders import SqlOrderRepository
from pharmacy.adapters.outbound.sql.stock import SqlStockLedger
from pharmacy.adapters.outbound.sql.suppliers import SqlSupplierRepository
from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import DEFAULT_CURRENCY
from pharmacy.core.ports.outbound.unit_of_work import PharmacyTransaction, UnitOfWork

log = logging.getLogger(__name__)


class SqlTransaction(PharmacyTransaction):
    """Repositories sharing one connection and one open transaction."""

    def __init__(self, conn: Connection, currency: str = DEFAULT_CURRENCY) -> None:
        self._trans = conn.begin()
        self.committed = False
        self.clients = SqlClientRepository(conn)
        self.medicines = SqlMedicineRepository(conn, currency)
        self.suppliers = SqlSupplierRepository(conn, currency)
        self.orders = SqlOrderRepository(conn, currency)
        self.stock = SqlStockLedger(conn)

    def commit(self) -> Result[None, PharmacyError]:
        try:
            self._trans.commit()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "commit"))
        self.committed = True
        return Success(None)

    def rollback(self) -> None:
        if self._trans.is_active:
            self._trans.rollback()


class _SqlTransactionScope:
    def __init__(self, engine: Engine, currency: str) -> None:
        self._engine = engine
        self._currency = currency
        self._conn: Connection | None = None
        self._tx: SqlTransaction | None = None

    def __enter__(self) -> SqlTransaction:
        try:
            self._conn = self._engine.connect()
            self._tx = SqlTransaction(self._conn, self._currency)
        except SQLAlchemyError as exc:
            if self._conn is not None:
                self._conn.close()
            raise storage_error(exc, "open transaction") from exc
        return self._tx

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._conn is None or self._tx is None:
            # never entered
            return False
        try:
            if not self._tx.committed:
                self._tx.rollback()
        except SQLAlchemyError as rollback_exc:
            if exc is None:
                raise storage_error(rollback_exc, "rollback") from rollback_exc
            log.error("rollback failed while handling %r", exc, exc_info=rollback_exc)
        finally:
            self._conn.close()
        return False


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, engine: Engine, currency: str = DEFAULT_CURRENCY) -> None:
        self._engine = engine
        self._currency = currency

    def begin(self) -> _SqlTransactionScope:
        return _SqlTransactionScope(self._engine, self._currency)
