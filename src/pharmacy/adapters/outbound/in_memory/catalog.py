from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence, Tuple

from returns.result import Failure, Result, Success

from pharmacy.adapters.outbound.in_memory.store import (
    InMemoryStore,
    Journal,
    order_references_client,
    order_references_medicine,
)
from pharmacy.core.domain.model.catalog import (
    Address,
    Client,
    Medicine,
    Supplier,
    SupplierMedicine,
)
from pharmacy.core.domain.model.errors import IntegrityConflict, NotFound, PharmacyError
from pharmacy.core.domain.model.order import (
    ClientId,
    MedicineId,
    Money,
    SupplierId,
)
from pharmacy.core.ports.outbound.clients import ClientRepository
from pharmacy.core.ports.outbound.medicines import MedicineRepository
from pharmacy.core.ports.outbound.suppliers import SupplierRepository


def _not_found(entity: str, entity_id: int) -> NotFound:
    return NotFound(message=f"{entity} does not exist", entity=entity, entity_id=entity_id)


@dataclass
class InMemoryClientRepository(ClientRepository):
    store: InMemoryStore
    journal: Journal

    def add(self, client: Client) -> Result[ClientId, PharmacyError]:
        cid = ClientId(self.store.next_id("client"))
        stored = replace(client, client_id=cid)
        self.journal.on_commit(lambda: self.store.clients.__setitem__(cid.value, stored))
        return Success(cid)

    def get(self, client_id: ClientId) -> Result[Client, PharmacyError]:
        with self.store.lock:
            client = self.store.clients.get(client_id.value)
        if client is None:
            return Failure(_not_found("client", client_id.value))
        return Success(client)

    def list_all(self) -> Result[Sequence[Client], PharmacyError]:
        with self.store.lock:
            return Success(tuple(self.store.clients[k] for k in sorted(self.store.clients)))

    def update_address(
        self, client_id: ClientId, address: Address
    ) -> Result[None, PharmacyError]:
        cid = client_id.value
        with self.store.lock:
            if cid not in self.store.clients:
                return Failure(_not_found("client", cid))

        def apply() -> None:
            current = self.store.clients.get(cid)
            if current is not None:
                self.store.clients[cid] = replace(current, address=address)

        self.journal.on_commit(apply)
        return Success(None)

    def delete(self, client_id: ClientId) -> Result[None, PharmacyError]:
        cid = client_id.value
        with self.store.lock:
            if cid not in self.store.clients:
                return Failure(_not_found("client", cid))
            conflict = self._still_referenced(cid)
        if conflict is not None:
            return Failure(conflict)
        # an order for this client may commit before this transaction does
        self.journal.check_on_commit(lambda: self._still_referenced(cid))
        self.journal.on_commit(lambda: self.store.clients.pop(cid, None))
        return Success(None)

    def _still_referenced(self, cid: int) -> IntegrityConflict | None:
        if order_references_client(self.store, cid):
            return IntegrityConflict(message=f"client {cid} still has orders")
        return None


@dataclass
class InMemoryMedicineRepository(MedicineRepository):
    store: InMemoryStore
    journal: Journal

    def get(self, medicine_id: MedicineId) -> Result[Medicine, PharmacyError]:
        mid = medicine_id.value
        with self.store.medicine_lock(mid):
            med = self.store.medicines.get(mid)
        if med is None:
            return Failure(_not_found("medicine", mid))
        return Success(med)

    def get_unit_price(self, medicine_id: MedicineId) -> Result[Money, PharmacyError]:
        return self.get(medicine_id).map(lambda med: med.unit_price)

    def list_all(self) -> Result[Sequence[Medicine], PharmacyError]:
        with self.store.lock:
            meds = list(self.store.medicines.values())
        return Success(tuple(sorted(meds, key=lambda m: (m.name, m.medicine_id.value))))

    def add(self, medicine: Medicine) -> Result[MedicineId, PharmacyError]:
        mid = MedicineId(self.store.next_id("medicine"))
        stored = replace(medicine, medicine_id=mid)
        self.journal.on_commit(lambda: self.store.medicines.__setitem__(mid.value, stored))
        return Success(mid)

    def update_unit_price(
        self, medicine_id: MedicineId, unit_price: Money
    ) -> Result[None, PharmacyError]:
        mid = medicine_id.value
        with self.store.lock:
            if mid not in self.store.medicines:
                return Failure(_not_found("medicine", mid))

        def apply() -> None:
            with self.store.medicine_lock(mid):
                current = self.store.medicines.get(mid)
                if current is not None:
                    self.store.medicines[mid] = replace(current, unit_price=unit_price)

        self.journal.on_commit(apply)
        return Success(None)

    def delete(self, medicine_id: MedicineId) -> Result[None, PharmacyError]:
        mid = medicine_id.value
        with self.store.lock:
            if mid not in self.store.medicines:
                return Failure(_not_found("medicine", mid))
            conflict = self._still_referenced(mid)
        if conflict is not None:
            return Failure(conflict)
        self.journal.check_on_commit(lambda: self._still_referenced(mid))
        self.journal.on_commit(lambda: self.store.medicines.pop(mid, None))
        return Success(None)

    def _still_referenced(self, mid: int) -> IntegrityConflict | None:
        if order_references_medicine(self.store, mid) or any(
            key[1] == mid for key in self.store.links
        ):
            return IntegrityConflict(
                message=f"medicine {mid} is linked to existing orders or suppliers"
            )
        return None


@dataclass
class InMemorySupplierRepository(SupplierRepository):
    store: InMemoryStore
    journal: Journal

    def add(self, supplier: Supplier) -> Result[SupplierId, PharmacyError]:
        sid = SupplierId(self.store.next_id("supplier"))
        stored = replace(supplier, supplier_id=sid)
        self.journal.on_commit(lambda: self.store.suppliers.__setitem__(sid.value, stored))
        return Success(sid)

    def list_all(self) -> Result[Sequence[Supplier], PharmacyError]:
        with self.store.lock:
            sups = list(self.store.suppliers.values())
        return Success(tuple(sorted(sups, key=lambda s: (s.name, s.supplier_id.value))))

    def delete(self, supplier_id: SupplierId) -> Result[None, PharmacyError]:
        sid = supplier_id.value
        with self.store.lock:
            if sid not in self.store.suppliers:
                return Failure(_not_found("supplier", sid))
            conflict = self._still_linked(sid)
        if conflict is not None:
            return Failure(conflict)
        self.journal.check_on_commit(lambda: self._still_linked(sid))
        self.journal.on_commit(lambda: self.store.suppliers.pop(sid, None))
        return Success(None)

    def link_medicine(self, link: SupplierMedicine) -> Result[None, PharmacyError]:
        key = (link.supplier_id.value, link.medicine_id.value)
        with self.store.lock:
            conflict = self._dangling(key)
        if conflict is not None:
            return Failure(conflict)
        self.journal.check_on_commit(lambda: self._dangling(key))
        self.journal.on_commit(lambda: self.store.links.__setitem__(key, link))
        return Success(None)

    def medicines_of(
        self, supplier_id: SupplierId
    ) -> Result[Sequence[SupplierMedicine], PharmacyError]:
        with self.store.lock:
            links = [v for k, v in self.store.links.items() if k[0] == supplier_id.value]
        return Success(tuple(sorted(links, key=lambda sm: sm.medicine_id.value)))

    def _still_linked(self, sid: int) -> IntegrityConflict | None:
        if any(key[0] == sid for key in self.store.links):
            return IntegrityConflict(message=f"supplier {sid} still supplies medicines")
        return None

    def _dangling(self, key: Tuple[int, int]) -> IntegrityConflict | None:
        if key[0] not in self.store.suppliers or key[1] not in self.store.medicines:
            return IntegrityConflict(message="supplier or medicine does not exist")
        return None
