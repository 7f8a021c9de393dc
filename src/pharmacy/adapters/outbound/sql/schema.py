from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    PrimaryKeyConstraint,
    String,
    Table,
    inspect,
    text,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

PRICE = Numeric(10, 2)

client_table = Table(
    "client",
    metadata,
    Column("client_id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("country", String(100), nullable=False),
    Column("city", String(100), nullable=False),
    Column("street", String(200), nullable=False),
    Column("postal_code", String(20), nullable=False),
)

medicine_table = Table(
    "medicine",
    metadata,
    Column("medicine_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(200), nullable=False),
    Column("unit_price", PRICE, nullable=False),
    Column("stock", Integer, nullable=False, server_default=text("0")),
    CheckConstraint("unit_price > 0", name="ck_medicine_unit_price_positive"),
    CheckConstraint("stock >= 0", name="ck_medicine_stock_non_negative"),
)

supplier_table = Table(
    "supplier",
    metadata,
    Column("supplier_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(200), nullable=False),
    Column("country", String(100), nullable=False),
    Column("city", String(100), nullable=False),
    Column("street", String(200), nullable=False),
    Column("postal_code", String(20), nullable=False),
)

supplier_medicine_table = Table(
    "suppliermedicine",
    metadata,
    Column("supplier_id", Integer, ForeignKey("supplier.supplier_id"), nullable=False),
    Column("medicine_id", Integer, ForeignKey("medicine.medicine_id"), nullable=False),
    Column("supply_price", PRICE, nullable=False),
    PrimaryKeyConstraint("supplier_id", "medicine_id"),
    CheckConstraint("supply_price > 0", name="ck_suppliermedicine_price_positive"),
)

order_table = Table(
    "order",
    metadata,
    Column("order_id", Integer, primary_key=True, autoincrement=True),
    Column("client_id", Integer, ForeignKey("client.client_id"), nullable=False),
    Column("order_date", Date, nullable=False),
    Column("total_price", PRICE, nullable=False, server_default=text("0")),
    CheckConstraint("total_price >= 0", name="ck_order_total_non_negative"),
)

order_item_table = Table(
    "orderitem",
    metadata,
    Column(
        "order_id",
        Integer,
        ForeignKey("order.order_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("medicine_id", Integer, ForeignKey("medicine.medicine_id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("unit_price", PRICE, nullable=False),
    PrimaryKeyConstraint("order_id", "medicine_id"),
    CheckConstraint("quantity > 0", name="ck_orderitem_quantity_positive"),
    CheckConstraint("unit_price > 0", name="ck_orderitem_unit_price_positive"),
)

DETAILED_ORDER_SUMMARY = "detailed_order_summary"

_SUMMARY_VIEW_DDL = f"""
CREATE VIEW {DETAILED_ORDER_SUMMARY} AS
SELECT
    o.order_id,
    o.order_date,
    c.first_name AS client_first_name,
    c.last_name AS client_last_name,
    o.total_price,
    COALESCE(SUM(oi.quantity), 0) AS total_items_count
FROM "order" o
JOIN client c ON c.client_id = o.client_id
LEFT JOIN orderitem oi ON oi.order_id = o.order_id
GROUP BY o.order_id, o.order_date, c.first_name, c.last_name, o.total_price
"""


def create_schema(engine: Engine) -> None:
    """Create missing tables and the reporting view."""
    metadata.create_all(engine)
    if DETAILED_ORDER_SUMMARY in inspect(engine).get_view_names():
        return
    with engine.begin() as conn:
        conn.execute(text(_SUMMARY_VIEW_DDL))
