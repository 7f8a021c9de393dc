from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from returns.result import Failure, Result, Success
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, Row
from sqlalchemy.exc import SQLAlchemyError

from pharmacy.adapters.outbound.sql.errors import storage_error
from pharmacy.adapters.outbound.sql.schema import client_table
from pharmacy.core.domain.model.catalog import Address, Client
from pharmacy.core.domain.model.errors import NotFound, PharmacyError
from pharmacy.core.domain.model.order import ClientId
from pharmacy.core.ports.outbound.clients import ClientRepository


def _not_found(client_id: ClientId) -> NotFound:
    return NotFound(message="client does not exist", entity="client", entity_id=client_id.value)


@dataclass
class SqlClientRepository(ClientRepository):
    conn: Connection

    def add(self, client: Client) -> Result[ClientId, PharmacyError]:
        stmt = insert(client_table).values(
            first_name=client.first_name,
            last_name=client.last_name,
            **_address_columns(client.address),
        )
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "add client"))
        return Success(ClientId(res.inserted_primary_key[0]))

    def get(self, client_id: ClientId) -> Result[Client, PharmacyError]:
        stmt = select(client_table).where(client_table.c.client_id == client_id.value)
        try:
            row = self.conn.execute(stmt).one_or_none()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "load client"))
        if row is None:
            return Failure(_not_found(client_id))
        return Success(_to_client(row))

    def list_all(self) -> Result[Sequence[Client], PharmacyError]:
        stmt = select(client_table).order_by(client_table.c.client_id)
        try:
            rows = self.conn.execute(stmt).all()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "list clients"))
        return Success(tuple(_to_client(r) for r in rows))

    def update_address(
        self, client_id: ClientId, address: Address
    ) -> Result[None, PharmacyError]:
        stmt = (
            update(client_table)
            .where(client_table.c.client_id == client_id.value)
            .values(**_address_columns(address))
        )
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "update client address"))
        if res.rowcount == 0:
            return Failure(_not_found(client_id))
        return Success(None)

    def delete(self, client_id: ClientId) -> Result[None, PharmacyError]:
        stmt = delete(client_table).where(client_table.c.client_id == client_id.value)
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            # the client still has orders
            return Failure(storage_error(exc, f"delete client {client_id.value}"))
        if res.rowcount == 0:
            return Failure(_not_found(client_id))
        return Success(None)


def _address_columns(address: Address) -> dict:
    return {
        "country": address.country,
        "city": address.city,
        "street": address.street,
        "postal_code": address.postal_code,
    }


def _to_client(row: Row) -> Client:
    return Client(
        client_id=ClientId(row.client_id),
        first_name=row.first_name,
        last_name=row.last_name,
        address=Address(row.country, row.city, row.street, row.postal_code),
    )
