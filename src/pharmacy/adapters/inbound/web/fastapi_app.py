from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable, TypeVar

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from returns.result import Failure, Result, Success

from pharmacy.bootstrap import UseCases
from pharmacy.core.domain.model.errors import ErrorKind, PharmacyError
from pharmacy.core.ports.inbound.get_order import GetOrderQuery, OrderLineView
from pharmacy.core.ports.inbound.list_orders import ListOrdersQuery
from pharmacy.core.ports.inbound.place_order import PlaceOrderCommand, PlaceOrderLine

log = logging.getLogger(__name__)

T = TypeVar("T")

# ---- HTTP DTOs (adapter layer) ---------------------------------------------


class PlaceOrderLineIn(BaseModel):
    medicine_id: int = Field(gt=0, examples=[1])
    quantity: int = Field(gt=0, examples=[2])


class PlaceOrderRequest(BaseModel):
    client_id: int = Field(gt=0, examples=[1])
    lines: list[PlaceOrderLineIn] = Field(min_length=1)


class OrderLineOut(BaseModel):
    medicine_id: int
    unit_price: str
    quantity: int
    subtotal: str


class OrderReceiptResponse(BaseModel):
    order_id: int
    client_id: int
    total: str
    currency: str
    lines: list[OrderLineOut]


class OrderDetailsResponse(BaseModel):
    order_id: int
    client_id: int
    order_date: dt.date
    total: str
    currency: str
    lines: list[OrderLineOut]


class OrderSummaryOut(BaseModel):
    order_id: int
    client_id: int
    order_date: dt.date
    total: str
    currency: str


class DetailedSummaryOut(BaseModel):
    order_id: int
    order_date: dt.date
    client_first_name: str
    client_last_name: str
    total: str
    currency: str
    total_items_count: int


class MedicineOut(BaseModel):
    medicine_id: int
    name: str
    unit_price: str
    currency: str
    stock: int


class ClientOut(BaseModel):
    client_id: int
    first_name: str
    last_name: str
    country: str
    city: str
    street: str
    postal_code: str


class ErrorResponse(BaseModel):
    type: str
    kind: str
    message: str
    details: list[dict[str, Any]] | None = None


_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTEGRITY_CONFLICT: 409,
    ErrorKind.STORAGE_FAILURE: 503,
}


def _error_response(err: PharmacyError) -> JSONResponse:
    status = _STATUS_BY_KIND.get(err.kind, 500)
    body = ErrorResponse(type=type(err).__name__, kind=err.kind.value, message=str(err))
    return JSONResponse(status_code=status, content=body.model_dump())


def _call(fn: Callable[[], Result[T, PharmacyError]]) -> Result[T, PharmacyError]:
    # a transaction that cannot even be opened raises instead of returning
    try:
        return fn()
    except PharmacyError as exc:
        return Failure(exc)


def _line_out(ln: OrderLineView) -> OrderLineOut:
    return OrderLineOut(
        medicine_id=ln.medicine_id,
        unit_price=str(ln.unit_price.amount),
        quantity=ln.quantity,
        subtotal=str(ln.subtotal.amount),
    )


def create_app(usecases: UseCases) -> FastAPI:
    app = FastAPI(title="pharmacy")

    # --- exception handlers --------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            type="RequestValidationError",
            kind=ErrorKind.VALIDATION.value,
            message="invalid request",
            details=[{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()],
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        log.exception("unhandled error")
        body = ErrorResponse(
            type=type(exc).__name__, kind="internal", message="internal server error"
        )
        return JSONResponse(status_code=500, content=body.model_dump())

    # --- routes --------------------------------------------------------------

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(
        "/orders",
        response_model=OrderReceiptResponse,
        status_code=201,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
            503: {"model": ErrorResponse},
        },
    )
    def place_order(req: PlaceOrderRequest, response: Response) -> Any:
        cmd = PlaceOrderCommand(
            client_id=req.client_id,
            lines=tuple(
                PlaceOrderLine(medicine_id=ln.medicine_id, quantity=ln.quantity)
                for ln in req.lines
            ),
        )
        result = _call(lambda: usecases.place_order.place_order(cmd))
        if not isinstance(result, Success):
            return _error_response(result.failure())

        receipt = result.unwrap()
        response.headers["Location"] = f"/orders/{receipt.order_id.value}"
        return OrderReceiptResponse(
            order_id=receipt.order_id.value,
            client_id=receipt.client_id.value,
            total=str(receipt.total.amount),
            currency=receipt.total.currency,
            lines=[_line_out(ln) for ln in receipt.lines],
        )

    @app.get("/orders", response_model=list[OrderSummaryOut])
    def list_orders(client_id: int | None = None) -> Any:
        result = _call(
            lambda: usecases.list_orders.list_orders(ListOrdersQuery(client_id=client_id))
        )
        if not isinstance(result, Success):
            return _error_response(result.failure())
        return [
            OrderSummaryOut(
                order_id=v.order_id.value,
                client_id=v.client_id.value,
                order_date=v.order_date,
                total=str(v.total.amount),
                currency=v.total.currency,
            )
            for v in result.unwrap()
        ]

    @app.get("/orders/summaries", response_model=list[DetailedSummaryOut])
    def detailed_summaries() -> Any:
        result = _call(usecases.list_orders.detailed_summaries)
        if not isinstance(result, Success):
            return _error_response(result.failure())
        return [
            DetailedSummaryOut(
                order_id=s.order_id.value,
                order_date=s.order_date,
                client_first_name=s.client_first_name,
                client_last_name=s.client_last_name,
                total=str(s.total.amount),
                currency=s.total.currency,
                total_items_count=s.total_items_count,
            )
            for s in result.unwrap()
        ]

    @app.get(
        "/orders/{order_id}",
        response_model=OrderDetailsResponse,
        responses={404: {"model": ErrorResponse}},
    )
    def get_order(order_id: int) -> Any:
        result = _call(lambda: usecases.get_order.get_order(GetOrderQuery(order_id)))
        if not isinstance(result, Success):
            return _error_response(result.failure())
        view = result.unwrap()
        return OrderDetailsResponse(
            order_id=view.order_id.value,
            client_id=view.client_id.value,
            order_date=view.order_date,
            total=str(view.total.amount),
            currency=view.total.currency,
            lines=[_line_out(ln) for ln in view.lines],
        )

    @app.delete(
        "/orders/{order_id}",
        status_code=204,
        responses={404: {"model": ErrorResponse}},
    )
    def delete_order(order_id: int) -> Response:
        result = _call(lambda: usecases.get_order.delete_order(GetOrderQuery(order_id)))
        if not isinstance(result, Success):
            return _error_response(result.failure())
        return Response(status_code=204)

    @app.get("/medicines", response_model=list[MedicineOut])
    def list_medicines() -> Any:
        result = _call(usecases.catalog.list_medicines)
        if not isinstance(result, Success):
            return _error_response(result.failure())
        return [
            MedicineOut(
                medicine_id=m.medicine_id.value,
                name=m.name,
                unit_price=str(m.unit_price.amount),
                currency=m.unit_price.currency,
                stock=m.stock,
            )
            for m in result.unwrap()
        ]

    @app.get("/clients", response_model=list[ClientOut])
    def list_clients() -> Any:
        result = _call(usecases.catalog.list_clients)
        if not isinstance(result, Success):
            return _error_response(result.failure())
        return [
            ClientOut(
                client_id=c.client_id.value,
                first_name=c.first_name,
                last_name=c.last_name,
                country=c.address.country,
                city=c.address.city,
                street=c.address.street,
                postal_code=c.address.postal_code,
            )
            for c in result.unwrap()
        ]

    return app
