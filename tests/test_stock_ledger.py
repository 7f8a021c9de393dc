from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from returns.result import Failure, Success

from conftest import make_sql_uow, order_count, seed, stock_of
from pharmacy.bootstrap import build_usecases
from pharmacy.config import Settings
from pharmacy.core.domain.model.errors import ErrorKind, InsufficientStock, NotFound
from pharmacy.core.domain.model.order import MedicineId
from pharmacy.core.ports.inbound.place_order import PlaceOrderCommand


def test_unknown_medicine_is_not_found(uow, seeded):
    with uow.begin() as tx:
        result = tx.stock.decrement(MedicineId(9999), 1)

    assert isinstance(result.failure(), NotFound)
    assert result.failure().kind is ErrorKind.NOT_FOUND


def test_short_stock_is_insufficient_and_untouched(uow, seeded):
    with uow.begin() as tx:
        result = tx.stock.decrement(MedicineId(seeded.medicine_b), 4)
        assert tx.stock.level(MedicineId(seeded.medicine_b)).unwrap() == 3

    err = result.failure()
    assert isinstance(err, InsufficientStock)
    assert (err.medicine_id, err.requested, err.available) == (seeded.medicine_b, 4, 3)
    assert err.kind is ErrorKind.INTEGRITY_CONFLICT


def test_non_positive_quantity_is_rejected(uow, seeded):
    with uow.begin() as tx:
        result = tx.stock.decrement(MedicineId(seeded.medicine_a), 0)

    assert result.failure().kind is ErrorKind.VALIDATION
    assert stock_of(uow, seeded.medicine_a) == 10


def test_exact_stock_can_be_taken_to_zero(uow, seeded):
    with uow.begin() as tx:
        assert isinstance(tx.stock.decrement(MedicineId(seeded.medicine_b), 3), Success)
        tx.commit().unwrap()

    assert stock_of(uow, seeded.medicine_b) == 0


def test_uncommitted_decrement_is_given_back(uow, seeded):
    with uow.begin() as tx:
        tx.stock.decrement(MedicineId(seeded.medicine_a), 6).unwrap()

    assert stock_of(uow, seeded.medicine_a) == 10


def test_decrement_survives_commit(uow, seeded):
    with uow.begin() as tx:
        tx.stock.decrement(MedicineId(seeded.medicine_a), 6).unwrap()
        tx.commit().unwrap()

    assert stock_of(uow, seeded.medicine_a) == 4


def test_last_units_go_to_one_order_only_sequentially(uow, seeded, usecases):
    cmd = PlaceOrderCommand.from_mapping(seeded.client_id, {seeded.medicine_b: 2})

    first = usecases.place_order.place_order(cmd)
    second = usecases.place_order.place_order(cmd)

    assert isinstance(first, Success)
    assert isinstance(second.failure().reason, InsufficientStock)
    assert stock_of(uow, seeded.medicine_b) == 1
    assert order_count(uow) == 1


def test_last_units_go_to_one_order_only_concurrently(memory_uow):
    ids = seed(memory_uow)
    usecases = build_usecases(Settings(storage="memory"), uow=memory_uow)
    cmd = PlaceOrderCommand.from_mapping(ids.client_id, {ids.medicine_a: 6})
    barrier = threading.Barrier(2)

    def place():
        barrier.wait()
        return usecases.place_order.place_order(cmd)

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(lambda _: place(), range(2)))

    assert sorted(isinstance(r, Success) for r in results) == [False, True]
    (failed,) = [r.failure() for r in results if isinstance(r, Failure)]
    assert failed.kind is ErrorKind.INTEGRITY_CONFLICT
    assert stock_of(memory_uow, ids.medicine_a) == 4
    assert order_count(memory_uow) == 1


def test_stock_never_goes_negative_under_contention(memory_uow):
    ids = seed(memory_uow)
    usecases = build_usecases(Settings(storage="memory"), uow=memory_uow)
    workers = 16
    barrier = threading.Barrier(workers)

    def place(_):
        barrier.wait()
        return usecases.place_order.place_order(
            PlaceOrderCommand.from_mapping(ids.client_id, {ids.medicine_a: 1, ids.medicine_b: 1})
        )

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(place, range(workers)))

    placed = sum(isinstance(r, Success) for r in results)
    assert placed == 3
    assert all(r.failure().kind is ErrorKind.INTEGRITY_CONFLICT for r in results if isinstance(r, Failure))
    assert stock_of(memory_uow, ids.medicine_b) == 0
    assert stock_of(memory_uow, ids.medicine_a) == 10 - placed
    assert order_count(memory_uow) == placed


def test_last_units_go_to_one_order_only_concurrently_on_sqlite(tmp_path):
    uow = make_sql_uow(tmp_path)
    ids = seed(uow)
    usecases = build_usecases(Settings(), uow=uow)
    cmd = PlaceOrderCommand.from_mapping(ids.client_id, {ids.medicine_a: 6})
    barrier = threading.Barrier(2)

    def place(_):
        barrier.wait()
        return usecases.place_order.place_order(cmd)

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(place, range(2)))

    assert sorted(isinstance(r, Success) for r in results) == [False, True]
    assert stock_of(uow, ids.medicine_a) == 4
    assert order_count(uow) == 1


def test_stock_never_goes_negative_under_contention_on_sqlite(tmp_path):
    uow = make_sql_uow(tmp_path)
    ids = seed(uow)
    usecases = build_usecases(Settings(), uow=uow)
    workers = 6
    barrier = threading.Barrier(workers)

    def place(_):
        barrier.wait()
        return usecases.place_order.place_order(
            PlaceOrderCommand.from_mapping(ids.client_id, {ids.medicine_b: 1})
        )

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(place, range(workers)))

    placed = sum(isinstance(r, Success) for r in results)
    # SQLite serializes writers, so a loser may see a locked database instead of short stock
    assert 1 <= placed <= 3
    assert stock_of(uow, ids.medicine_b) == 3 - placed
    assert order_count(uow) == placed
