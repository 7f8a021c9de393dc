from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Tuple, TypeVar

from returns.result import Failure, Result

from pharmacy.bootstrap import UseCases
from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.ports.inbound.catalog import (
    AddressInput,
    MedicineLink,
    NewClient,
    NewMedicine,
    NewSupplier,
)
from pharmacy.core.ports.inbound.get_order import GetOrderQuery
from pharmacy.core.ports.inbound.list_orders import ListOrdersQuery
from pharmacy.core.ports.inbound.place_order import PlaceOrderCommand, PlaceOrderLine

T = TypeVar("T")

EXIT_CHOICE = 19
RULE = "-" * 43


class PharmacyMenu:
    """
    Numbered console menu over the pharmacy use cases.

    ``read`` and ``write`` default to input() and print(); tests pass
    scripted replacements.
    """

    def __init__(
        self,
        usecases: UseCases,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self.uc = usecases
        self.read = read
        self.write = write
        self._sections: List[Tuple[str, Dict[int, Tuple[str, Callable[[], None]]]]] = [
            (
                "CLIENTS & ORDERS",
                {
                    1: ("Add New Client", self.add_client),
                    2: ("Update Client Address", self.update_client_address),
                    3: ("Delete Client", self.delete_client),
                    4: ("View All Clients", self.list_clients),
                    5: ("Create New Order (Transaction)", self.create_order),
                    6: ("Delete Order", self.delete_order),
                    7: ("View Orders by Client ID", self.orders_by_client),
                    8: ("View Order Items by Order ID", self.order_items),
                    9: ("View All Orders (Detailed Summary)", self.detailed_orders),
                },
            ),
            (
                "MEDICINES",
                {
                    10: ("Add New Medicine", self.add_medicine),
                    11: ("Delete Medicine by ID", self.delete_medicine),
                    12: ("View All Medicines", self.list_medicines),
                },
            ),
            (
                "SUPPLIERS & LINKS",
                {
                    13: ("Add New Supplier", self.add_supplier),
                    14: ("Delete Supplier by ID", self.delete_supplier),
                    15: ("Add/Update Medicine Link to Supplier", self.link_medicine),
                    16: ("View Medicines by Supplier ID", self.medicines_by_supplier),
                    17: ("View All Suppliers", self.list_suppliers),
                },
            ),
        ]
        self._actions = {
            choice: action
            for _, entries in self._sections
            for choice, (_, action) in entries.items()
        }

    def run(self) -> int:
        self.write("--- PHARMACY DB MANAGEMENT SYSTEM ---")
        while True:
            self._show_menu()
            try:
                choice = self._ask_int("Select an option: ")
            except EOFError:
                return 0
            if choice is None:
                continue
            if choice == EXIT_CHOICE:
                self.write("Exiting application. Goodbye.")
                return 0

            action = self._actions.get(choice)
            if action is None:
                self.write(f"Invalid choice. Please select a number between 1 and {EXIT_CHOICE}.")
                continue
            try:
                action()
            except PharmacyError as exc:
                self._error(exc)
            except EOFError:
                return 0

    # ---- clients & orders --------------------------------------------------

    def add_client(self) -> None:
        first = self.read("First name: ")
        last = self.read("Last name: ")
        new = NewClient(first_name=first, last_name=last, address=self._ask_address())
        self._report(
            self.uc.catalog.add_client(new),
            lambda cid: f"Client {first} {last} successfully added with ID {cid.value}.",
        )

    def update_client_address(self) -> None:
        client_id = self._ask_int("Client ID: ")
        if client_id is None:
            return
        self._report(
            self.uc.catalog.update_client_address(client_id, self._ask_address()),
            lambda _: f"Client with ID {client_id} address updated.",
        )

    def delete_client(self) -> None:
        client_id = self._ask_int("Client ID to delete: ")
        if client_id is None:
            return
        self._report(
            self.uc.catalog.delete_client(client_id),
            lambda _: f"Client with ID {client_id} successfully deleted.",
        )

    def list_clients(self) -> None:
        result = self.uc.catalog.list_clients()
        if isinstance(result, Failure):
            self._error(result.failure())
            return
        clients = result.unwrap()
        if not clients:
            self.write("No clients found.")
            return
        self.write(f"{'ID':<5} | {'First Name':<15} | {'Last Name':<15} | {'Street':<20} | City")
        for c in clients:
            self.write(
                f"{c.client_id.value:<5} | {c.first_name:<15} | {c.last_name:<15} | "
                f"{c.address.street:<20} | {c.address.city}"
            )

    def create_order(self) -> None:
        client_id = self._ask_int("Enter Client ID for the order: ")
        if client_id is None:
            return

        lines: List[PlaceOrderLine] = []
        while True:
            medicine_id = self._ask_int("Enter Medicine ID (or 0 to finish): ")
            if medicine_id is None:
                continue
            if medicine_id == 0:
                break
            quantity = self._ask_int(f"Enter Quantity for Medicine {medicine_id}: ")
            if quantity is None or quantity <= 0:
                self.write("Quantity must be positive. Item skipped.")
                continue
            lines.append(PlaceOrderLine(medicine_id=medicine_id, quantity=quantity))

        if not lines:
            self.write("Order cancelled: No items were added.")
            return

        result = self.uc.place_order.place_order(
            PlaceOrderCommand(client_id=client_id, lines=tuple(lines))
        )
        if isinstance(result, Failure):
            self.write("Order was not created. Nothing was saved.")
            self._error(result.failure())
            return
        receipt = result.unwrap()
        self.write(
            f"SUCCESS: New Order created with ID {receipt.order_id.value}. "
            f"Total: {receipt.total.amount} {receipt.total.currency}"
        )

    def delete_order(self) -> None:
        order_id = self._ask_int("Order ID to delete: ")
        if order_id is None:
            return
        self._report(
            self.uc.get_order.delete_order(GetOrderQuery(order_id)),
            lambda _: f"Order with ID {order_id} was successfully deleted.",
        )

    def orders_by_client(self) -> None:
        client_id = self._ask_int("Client ID: ")
        if client_id is None:
            return
        result = self.uc.list_orders.list_orders(ListOrdersQuery(client_id=client_id))
        if isinstance(result, Failure):
            self._error(result.failure())
            return
        orders = result.unwrap()
        if not orders:
            self.write(f"No orders found for client {client_id}.")
            return
        for o in orders:
            self.write(
                f"Order {o.order_id.value} | {o.order_date.isoformat()} | "
                f"{o.total.amount} {o.total.currency}"
            )

    def order_items(self) -> None:
        order_id = self._ask_int("Order ID: ")
        if order_id is None:
            return
        result = self.uc.get_order.get_order(GetOrderQuery(order_id))
        if isinstance(result, Failure):
            self._error(result.failure())
            return
        view = result.unwrap()
        self.write(f"{'Medicine ID':<12} | {'Quantity':<8} | {'Unit Price':<10} | Subtotal")
        for ln in view.lines:
            self.write(
                f"{ln.medicine_id:<12} | {ln.quantity:<8} | "
                f"{str(ln.unit_price.amount):<10} | {ln.subtotal.amount}"
            )
        self.write(f"Total: {view.total.amount} {view.total.currency}")

    def detailed_orders(self) -> None:
        result = self.uc.list_orders.detailed_summaries()
        if isinstance(result, Failure):
            self._error(result.failure())
            return
        summaries = result.unwrap()
        if not summaries:
            self.write("No orders found in the system.")
            return
        self.write(f"{'ID':<5} | {'Date':<10} | {'Client':<25} | {'Items':<5} | Total")
        for s in summaries:
            client = f"{s.client_first_name} {s.client_last_name}"
            self.write(
                f"{s.order_id.value:<5} | {s.order_date.isoformat():<10} | {client:<25} | "
                f"{s.total_items_count:<5} | {s.total.amount}"
            )

    # ---- medicines ---------------------------------------------------------

    def add_medicine(self) -> None:
        name = self.read("Medicine name: ")
        price = self._ask_decimal("Unit price: ")
        stock = self._ask_int("Stock quantity: ")
        if price is None or stock is None:
            return
        self._report(
            self.uc.catalog.add_medicine(NewMedicine(name=name, unit_price=price, stock=stock)),
            lambda mid: f"Medicine '{name}' successfully added with ID: {mid.value}",
        )

    def delete_medicine(self) -> None:
        medicine_id = self._ask_int("Medicine ID to delete: ")
        if medicine_id is None:
            return
        self._report(
            self.uc.catalog.delete_medicine(medicine_id),
            lambda _: f"Medicine with ID {medicine_id} successfully deleted.",
        )

    def list_medicines(self) -> None:
        result = self.uc.catalog.list_medicines()
        if isinstance(result, Failure):
            self._error(result.failure())
            return
        medicines = result.unwrap()
        if not medicines:
            self.write("No medicines found.")
            return
        self.write(f"{'ID':<5} | {'Name':<25} | {'Unit Price':<10} | Stock")
        for m in medicines:
            self.write(
                f"{m.medicine_id.value:<5} | {m.name:<25} | "
                f"{str(m.unit_price.amount):<10} | {m.stock}"
            )

    # ---- suppliers ---------------------------------------------------------

    def add_supplier(self) -> None:
        name = self.read("Supplier name: ")
        self._report(
            self.uc.catalog.add_supplier(NewSupplier(name=name, address=self._ask_address())),
            lambda sid: f"Supplier '{name}' successfully added with ID: {sid.value}",
        )

    def delete_supplier(self) -> None:
        supplier_id = self._ask_int("Supplier ID to delete: ")
        if supplier_id is None:
            return
        self._report(
            self.uc.catalog.delete_supplier(supplier_id),
            lambda _: f"Supplier with ID {supplier_id} successfully deleted.",
        )

    def link_medicine(self) -> None:
        supplier_id = self._ask_int("Supplier ID: ")
        medicine_id = self._ask_int("Medicine ID: ")
        price = self._ask_decimal("Supply price: ")
        if supplier_id is None or medicine_id is None or price is None:
            return
        link = MedicineLink(supplier_id=supplier_id, medicine_id=medicine_id, supply_price=price)
        self._report(
            self.uc.catalog.link_medicine(link),
            lambda _: (
                f"Link established/updated: Supplier ID {supplier_id} supplies "
                f"Medicine ID {medicine_id} at price {price}."
            ),
        )

    def medicines_by_supplier(self) -> None:
        supplier_id = self._ask_int("Supplier ID: ")
        if supplier_id is None:
            return
        result = self.uc.catalog.medicines_of_supplier(supplier_id)
        if isinstance(result, Failure):
            self._error(result.failure())
            return
        links = result.unwrap()
        if not links:
            self.write(f"Supplier {supplier_id} supplies no medicines.")
            return
        for sm in links:
            self.write(f"Medicine {sm.medicine_id.value} | supply price {sm.supply_price.amount}")

    def list_suppliers(self) -> None:
        result = self.uc.catalog.list_suppliers()
        if isinstance(result, Failure):
            self._error(result.failure())
            return
        suppliers = result.unwrap()
        if not suppliers:
            self.write("No suppliers found.")
            return
        self.write(f"{'ID':<5} | {'Name':<25} | City")
        for s in suppliers:
            self.write(f"{s.supplier_id.value:<5} | {s.name:<25} | {s.address.city}")

    # ---- input / output helpers --------------------------------------------

    def _show_menu(self) -> None:
        for title, entries in self._sections:
            self.write(RULE)
            self.write(f"--- {title} ---")
            for choice, (label, _) in entries.items():
                self.write(f"{choice}. {label}")
        self.write(RULE)
        self.write(f"{EXIT_CHOICE}. Exit")
        self.write(RULE)

    def _ask_int(self, prompt: str) -> int | None:
        raw = self.read(prompt).strip()
        try:
            return int(raw)
        except ValueError:
            self.write("Invalid input. Please enter a valid number.")
            return None

    def _ask_decimal(self, prompt: str) -> Decimal | None:
        raw = self.read(prompt).strip()
        try:
            return Decimal(raw)
        except InvalidOperation:
            self.write("Invalid input. Please enter a valid amount.")
            return None

    def _ask_address(self) -> AddressInput:
        return AddressInput(
            country=self.read("Country: "),
            city=self.read("City: "),
            street=self.read("Street: "),
            postal_code=self.read("Postal code: "),
        )

    def _report(self, result: Result[T, PharmacyError], success: Callable[[T], str]) -> None:
        if isinstance(result, Failure):
            self._error(result.failure())
            return
        self.write(success(result.unwrap()))

    def _error(self, err: PharmacyError) -> None:
        self.write(f"ERROR [{err.kind.value}]: {err}")
