from __future__ import annotations

import itertools
import threading
from collections import defaultdict
from typing import Callable, DefaultDict, Dict, Iterator, List, Optional, Tuple

from pharmacy.core.domain.model.catalog import Client, Medicine, Supplier, SupplierMedicine
from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import DEFAULT_CURRENCY, Order


class InMemoryStore:
    """
    Committed state shared by every in-memory transaction.

    ``lock`` guards the tables and the id sequences. Each medicine also has
    its own lock, held around every read-modify-write of that medicine's
    row, so stock checks and decrements happen as one step.
    """

    def __init__(self, currency: str = DEFAULT_CURRENCY) -> None:
        self.currency = currency
        self.lock = threading.RLock()
        self.clients: Dict[int, Client] = {}
        self.medicines: Dict[int, Medicine] = {}
        self.suppliers: Dict[int, Supplier] = {}
        self.links: Dict[Tuple[int, int], SupplierMedicine] = {}
        self.orders: Dict[int, Order] = {}
        self._medicine_locks: Dict[int, threading.Lock] = {}
        self._sequences: DefaultDict[str, Iterator[int]] = defaultdict(
            lambda: itertools.count(1)
        )

    def next_id(self, table: str) -> int:
        # ids handed to rolled back rows are not reused, like a database sequence
        with self.lock:
            return next(self._sequences[table])

    def medicine_lock(self, medicine_id: int) -> threading.Lock:
        with self.lock:
            return self._medicine_locks.setdefault(medicine_id, threading.Lock())


class Journal:
    """
    Deferred writes applied on commit and compensations applied on rollback.

    Checks run under the store lock right before the deferred writes; the
    first one returning an error refuses the commit, the way a foreign key
    refuses a row whose parent is gone.
    """

    def __init__(self) -> None:
        self.checks: List[Callable[[], Optional[PharmacyError]]] = []
        self.redo: List[Callable[[], None]] = []
        self.undo: List[Callable[[], None]] = []

    def check_on_commit(self, check: Callable[[], Optional[PharmacyError]]) -> None:
        self.checks.append(check)

    def on_commit(self, action: Callable[[], None]) -> None:
        self.redo.append(action)

    def on_rollback(self, action: Callable[[], None]) -> None:
        self.undo.append(action)

    def clear(self) -> None:
        self.checks.clear()
        self.redo.clear()
        self.undo.clear()


def order_references_medicine(store: InMemoryStore, medicine_id: int) -> bool:
    return any(
        ln.medicine_id.value == medicine_id
        for o in store.orders.values()
        for ln in o.lines
    )


def order_references_client(store: InMemoryStore, client_id: int) -> bool:
    return any(o.client_id.value == client_id for o in store.orders.values())
