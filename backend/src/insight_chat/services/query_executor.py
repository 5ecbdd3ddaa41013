from __future__ import annotations
from typing import Any, Dict, List

import duckdb
from starlette.concurrency import run_in_threadpool

from ..errors import ExecutionFailure
from ..utils.logs import get_logger
from ..utils.response_formatting import dataframe_to_records
from .sql_store import SQLStore

logger = get_logger(__name__)


class QueryExecutor:
    """Runs generated SQL against the store. No rewriting, no retries."""

    def __init__(self, store: SQLStore):
        self.store = store

    async def execute(self, sql: str) -> List[Dict[str, Any]]:
        try:
            df = await run_in_threadpool(self.store.query, sql)
        except duckdb.Error as e:
            logger.warning(f"[sql_error] Query failed: {e}\nQuery: {sql}")
            raise ExecutionFailure(str(e), query=sql) from e
        return dataframe_to_records(df)
