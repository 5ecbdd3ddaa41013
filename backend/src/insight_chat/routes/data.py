"""
Data API Routes

This module provides read-only endpoints describing the loaded dataset:
row counts for the overview panel, table listing and sample rows.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.concurrency import run_in_threadpool

from ..deps import get_sql_store
from ..services.sql_store import SQLStore
from ..utils.logs import get_logger
from ..utils.response_formatting import dataframe_to_records

logger = get_logger(__name__)

router = APIRouter(prefix="/api/data", tags=["data"])

STATS_TABLES = {
    "customers": "customers",
    "orders": "orders",
    "products": "products",
    "orderItems": "order_items",
}
SAMPLE_TABLES = ("customers", "orders", "products", "order_items", "order_payments", "order_reviews", "sellers")


@router.get("/stats")
async def get_data_stats(store: SQLStore = Depends(get_sql_store)):
    """Row counts for the main tables. Zeros if the store cannot be queried."""
    try:
        counts = await run_in_threadpool(store.row_counts, list(STATS_TABLES.values()))
        stats = {key: counts.get(table, 0) for key, table in STATS_TABLES.items()}
    except Exception as e:
        logger.error(f"[stats_error] {e}")
        stats = {key: 0 for key in STATS_TABLES}
    return {"success": True, "stats": stats}


@router.get("/tables")
async def list_tables(store: SQLStore = Depends(get_sql_store)):
    """Get list of all database tables."""
    tables = await run_in_threadpool(store.table_names)
    return {"tables": tables}


@router.get("/sample/{table}")
async def get_sample(table: str, limit: int = Query(default=10, ge=1, le=1000),
                     store: SQLStore = Depends(get_sql_store)):
    """Get sample rows from one of the dataset tables."""
    if table not in SAMPLE_TABLES:
        raise HTTPException(status_code=400, detail="Invalid table name")
    try:
        df = await run_in_threadpool(store.sample, table, limit)
    except Exception as e:
        logger.error(f"[sample_error] {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "data": dataframe_to_records(df)}
