"""
Static description of the e-commerce dataset.

The descriptor is built once at import time and rendered to the text blob
that is handed to the model with every translation request. The same
definitions drive the DDL used by ``SQLStore`` to create empty tables.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Optional


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    sql_type: str
    description: str
    reference: Optional[str] = None   # "table.column" this column points at


@dataclass(frozen=True)
class TableSpec:
    name: str
    columns: Tuple[ColumnSpec, ...]
    primary_key: Tuple[str, ...] = ()

    def create_sql(self) -> str:
        cols = [f"{c.name} {c.sql_type}" for c in self.columns]
        if self.primary_key:
            cols.append(f"PRIMARY KEY ({', '.join(self.primary_key)})")
        body = ",\n    ".join(cols)
        return f"CREATE TABLE IF NOT EXISTS {self.name} (\n    {body}\n)"


@dataclass(frozen=True)
class Relationship:
    source: str
    target: str

    def __str__(self) -> str:
        return f"{self.source} -> {self.target}"


@dataclass(frozen=True)
class SchemaDescriptor:
    title: str
    tables: Tuple[TableSpec, ...]
    relationships: Tuple[Relationship, ...]

    @property
    def table_names(self) -> Tuple[str, ...]:
        return tuple(t.name for t in self.tables)

    def table(self, name: str) -> Optional[TableSpec]:
        for t in self.tables:
            if t.name == name:
                return t
        return None

    def describe(self) -> str:
        """Render the human-readable schema text used in prompts."""
        lines = [f"Database Schema for {self.title}:", ""]
        for i, table in enumerate(self.tables, start=1):
            lines.append(f"{i}. {table.name} table:")
            for col in table.columns:
                tags = [col.sql_type.split("(")[0]]
                if col.name in table.primary_key and len(table.primary_key) == 1:
                    tags.append("PRIMARY KEY")
                if col.reference:
                    tags.append("FOREIGN KEY")
                desc = col.description
                if col.reference:
                    desc = f"{desc}. References {col.reference}"
                lines.append(f"   - {col.name} ({', '.join(tags)}): {desc}")
            lines.append("")
        lines.append("Common Relationships:")
        lines.extend(f"- {rel}" for rel in self.relationships)
        return "\n".join(lines)


def _col(name, sql_type, description, reference=None) -> ColumnSpec:
    return ColumnSpec(name, sql_type, description, reference)


ECOMMERCE_SCHEMA = SchemaDescriptor(
    title="Brazilian E-commerce Dataset",
    tables=(
        TableSpec("customers", (
            _col("customer_id", "VARCHAR", "Unique order customer ID"),
            _col("customer_unique_id", "VARCHAR", "Unique customer identifier"),
            _col("customer_zip_code_prefix", "VARCHAR", "Customer zip code prefix"),
            _col("customer_city", "VARCHAR", "Customer city"),
            _col("customer_state", "VARCHAR", "Customer state"),
        ), primary_key=("customer_id",)),
        TableSpec("orders", (
            _col("order_id", "VARCHAR", "Unique order identifier"),
            _col("customer_id", "VARCHAR", "Customer who placed the order", "customers.customer_id"),
            _col("order_status", "VARCHAR", "Order status (delivered, shipped, etc.)"),
            _col("order_purchase_timestamp", "TIMESTAMP", "When order was placed"),
            _col("order_approved_at", "TIMESTAMP", "When order was approved"),
            _col("order_delivered_carrier_date", "TIMESTAMP", "When order was sent to carrier"),
            _col("order_delivered_customer_date", "TIMESTAMP", "When order was delivered"),
            _col("order_estimated_delivery_date", "TIMESTAMP", "Estimated delivery date"),
        ), primary_key=("order_id",)),
        TableSpec("order_items", (
            _col("order_id", "VARCHAR", "Order the item belongs to", "orders.order_id"),
            _col("order_item_id", "INTEGER", "Item sequence number"),
            _col("product_id", "VARCHAR", "Product sold", "products.product_id"),
            _col("seller_id", "VARCHAR", "Seller identifier"),
            _col("shipping_limit_date", "TIMESTAMP", "Shipping deadline"),
            _col("price", "DECIMAL(10,2)", "Item price"),
            _col("freight_value", "DECIMAL(10,2)", "Shipping cost"),
        ), primary_key=("order_id", "order_item_id")),
        TableSpec("products", (
            _col("product_id", "VARCHAR", "Unique product identifier"),
            _col("product_category_name", "VARCHAR", "Product category (e.g., 'electronics', 'furniture')"),
            _col("product_name_lenght", "INTEGER", "Product name length"),
            _col("product_description_lenght", "INTEGER", "Description length"),
            _col("product_photos_qty", "INTEGER", "Number of photos"),
            _col("product_weight_g", "DECIMAL(10,2)", "Weight in grams"),
            _col("product_length_cm", "DECIMAL(10,2)", "Length in cm"),
            _col("product_height_cm", "DECIMAL(10,2)", "Height in cm"),
            _col("product_width_cm", "DECIMAL(10,2)", "Width in cm"),
        ), primary_key=("product_id",)),
        TableSpec("order_payments", (
            _col("order_id", "VARCHAR", "Order being paid", "orders.order_id"),
            _col("payment_sequential", "INTEGER", "Payment sequence number"),
            _col("payment_type", "VARCHAR", "Payment method (credit_card, boleto, etc.)"),
            _col("payment_installments", "INTEGER", "Number of installments"),
            _col("payment_value", "DECIMAL(10,2)", "Payment amount"),
        ), primary_key=("order_id", "payment_sequential")),
        TableSpec("order_reviews", (
            _col("review_id", "VARCHAR", "Unique review identifier"),
            _col("order_id", "VARCHAR", "Reviewed order", "orders.order_id"),
            _col("review_score", "INTEGER", "Review score (1-5)"),
            _col("review_comment_title", "VARCHAR", "Review title"),
            _col("review_comment_message", "TEXT", "Review message"),
            _col("review_creation_date", "TIMESTAMP", "When review was created"),
            _col("review_answer_timestamp", "TIMESTAMP", "When review was answered"),
        )),
        TableSpec("sellers", (
            _col("seller_id", "VARCHAR", "Unique seller identifier"),
            _col("seller_zip_code_prefix", "VARCHAR", "Seller zip code prefix"),
            _col("seller_city", "VARCHAR", "Seller city"),
            _col("seller_state", "VARCHAR", "Seller state"),
        ), primary_key=("seller_id",)),
        TableSpec("geolocation", (
            _col("geolocation_zip_code_prefix", "VARCHAR", "Zip code prefix"),
            _col("geolocation_lat", "DECIMAL(10,8)", "Latitude"),
            _col("geolocation_lng", "DECIMAL(11,8)", "Longitude"),
            _col("geolocation_city", "VARCHAR", "City"),
            _col("geolocation_state", "VARCHAR", "State"),
        )),
    ),
    relationships=(
        Relationship("orders.customer_id", "customers.customer_id"),
        Relationship("order_items.order_id", "orders.order_id"),
        Relationship("order_items.product_id", "products.product_id"),
        Relationship("order_payments.order_id", "orders.order_id"),
        Relationship("order_reviews.order_id", "orders.order_id"),
    ),
)

SCHEMA_TEXT = ECOMMERCE_SCHEMA.describe()
