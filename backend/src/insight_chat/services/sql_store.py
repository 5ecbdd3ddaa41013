from __future__ import annotations
import duckdb, pandas as pd, os
from typing import Dict, List
from ..config import Settings
from .schema_catalog import ECOMMERCE_SCHEMA, SchemaDescriptor


class SQLStore:
    def __init__(self, settings: Settings, schema: SchemaDescriptor = ECOMMERCE_SCHEMA):
        self.path = settings.duckdb_path
        self.schema = schema
        if self.path != ":memory:" and os.path.dirname(self.path):
            os.makedirs(os.path.dirname(self.path), exist_ok=True)
        self.con = duckdb.connect(self.path)
        self._init_tables()

    def _init_tables(self):
        # No FOREIGN KEY constraints: the public dataset has dangling references.
        for table in self.schema.tables:
            self.con.execute(table.create_sql())

    def query(self, sql: str) -> pd.DataFrame:
        # One cursor per call: the connection itself is shared across threads.
        cur = self.con.cursor()
        try:
            return cur.execute(sql).fetch_df()
        finally:
            cur.close()

    def table_names(self) -> List[str]:
        return self.query("SHOW TABLES")["name"].tolist()

    def row_counts(self, tables: List[str]) -> Dict[str, int]:
        counts = {}
        for table in tables:
            df = self.query(f"SELECT COUNT(*) AS count FROM {table}")
            counts[table] = int(df.iloc[0]["count"])
        return counts

    def sample(self, table: str, limit: int = 10) -> pd.DataFrame:
        if self.schema.table(table) is None:
            raise ValueError(f"Invalid table name: {table}")
        return self.query(f"SELECT * FROM {table} LIMIT {int(limit)}")

    def close(self):
        self.con.close()
