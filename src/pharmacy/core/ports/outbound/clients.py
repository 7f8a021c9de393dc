from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from pharmacy.core.domain.model.catalog import Address, Client
from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import ClientId


class ClientRepository(Protocol):
    def add(self, client: Client) -> Result[ClientId, PharmacyError]: ...

    def get(self, client_id: ClientId) -> Result[Client, PharmacyError]: ...

    def list_all(self) -> Result[Sequence[Client], PharmacyError]: ...

    def update_address(
        self, client_id: ClientId, address: Address
    ) -> Result[None, PharmacyError]: ...

    def delete(self, client_id: ClientId) -> Result[None, PharmacyError]: ...
