from __future__ import annotations

from typing import ContextManager, Protocol

from returns.result import Result

from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.ports.outbound.clients import ClientRepository
from pharmacy.core.ports.outbound.medicines import MedicineRepository
from pharmacy.core.ports.outbound.orders import OrderRepository
from pharmacy.core.ports.outbound.stock import StockLedger
from pharmacy.core.ports.outbound.suppliers import SupplierRepository


class PharmacyTransaction(Protocol):
    """Repositories bound to one open transaction."""

    clients: ClientRepository
    medicines: MedicineRepository
    suppliers: SupplierRepository
    orders: OrderRepository
    stock: StockLedger

    def commit(self) -> Result[None, PharmacyError]: ...


class UnitOfWork(Protocol):
    """
    begin() opens a transaction boundary.

    Leaving the with-block without a successful commit() rolls every change
    back, including when an exception escapes the block. Failing to open the
    transaction raises StorageFailure.
    """

    def begin(self) -> ContextManager[PharmacyTransaction]: ...
