from __future__ import annotations

import pytest

from conftest import order_count, seed, stock_of
from pharmacy.adapters.inbound.cli import PharmacyMenu
from pharmacy.bootstrap import build_usecases
from pharmacy.config import Settings


class Script:
    def __init__(self, *answers):
        self.answers = list(answers)
        self.output = []

    def read(self, prompt):
        if not self.answers:
            raise EOFError
        return str(self.answers.pop(0))

    def write(self, text):
        self.output.append(text)

    @property
    def text(self):
        return "\n".join(self.output)


@pytest.fixture
def ids(memory_uow):
    return seed(memory_uow)


def run_menu(memory_uow, *answers) -> Script:
    script = Script(*answers)
    menu = PharmacyMenu(
        build_usecases(Settings(storage="memory"), uow=memory_uow),
        read=script.read,
        write=script.write,
    )
    assert menu.run() == 0
    return script


def test_exit_choice_says_goodbye(memory_uow):
    script = run_menu(memory_uow, 19)

    assert "Exiting application. Goodbye." in script.output
    assert "19. Exit" in script.output


def test_create_order_with_skipped_item(memory_uow, ids):
    script = run_menu(
        memory_uow,
        5, ids.client_id,
        ids.medicine_a, 2,
        ids.medicine_b, -1,
        0,
        19,
    )

    assert "Quantity must be positive. Item skipped." in script.output
    assert any(line.startswith("SUCCESS: New Order created with ID") for line in script.output)
    assert "Total: 4.00 EUR" in script.text
    assert stock_of(memory_uow, ids.medicine_a) == 8
    assert stock_of(memory_uow, ids.medicine_b) == 3


def test_order_without_items_is_cancelled(memory_uow, ids):
    script = run_menu(memory_uow, 5, ids.client_id, 0, 19)

    assert "Order cancelled: No items were added." in script.output
    assert order_count(memory_uow) == 0


def test_failed_order_reports_nothing_saved(memory_uow, ids):
    script = run_menu(memory_uow, 5, ids.client_id, ids.medicine_a, 1, ids.medicine_b, 50, 0, 19)

    assert "Order was not created. Nothing was saved." in script.output
    assert "ERROR [integrity_conflict]" in script.text
    assert stock_of(memory_uow, ids.medicine_a) == 10
    assert order_count(memory_uow) == 0


def test_invalid_choices_are_reported(memory_uow):
    script = run_menu(memory_uow, "abc", 42, 19)

    assert "Invalid input. Please enter a valid number." in script.output
    assert "Invalid choice. Please select a number between 1 and 19." in script.output


def test_add_and_list_medicine(memory_uow):
    script = run_menu(memory_uow, 10, "Aspirin", "3.20", 40, 12, 19)

    assert "Medicine 'Aspirin' successfully added with ID: 1" in script.output
    assert any("Aspirin" in line and line.endswith("| 40") for line in script.output)


def test_delete_unknown_client_prints_error(memory_uow):
    script = run_menu(memory_uow, 3, 77, 19)

    assert "ERROR [not_found]" in script.text


def test_end_of_input_leaves_the_menu(memory_uow):
    run_menu(memory_uow, 4)


@pytest.mark.parametrize("price", ["NaN", "Infinity", "1e30"])
def test_unrepresentable_price_keeps_the_menu_running(memory_uow, price):
    script = run_menu(memory_uow, 10, "Aspirin", price, 5, 12, 19)

    assert "ERROR [validation]" in script.text
    assert "No medicines found." in script.output
    assert "Exiting application. Goodbye." in script.output
