"""Fake Supabase Client for Testing"""
import copy
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError


class FakeResponse:
    """Mimics postgrest APIResponse"""
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data
        self.count = len(data)


class FakeQuery:
    """Chainable query builder over one in-memory table"""
    def __init__(self, db: "FakeSupabaseDB", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.payload: Optional[Dict[str, Any]] = None
        self.filters: List[tuple] = []
        self.order_by: Optional[tuple] = None
        self.row_limit: Optional[int] = None

    def select(self, *columns):
        self.operation = "select"
        return self

    def insert(self, data: Dict[str, Any]):
        self.operation = "insert"
        self.payload = copy.deepcopy(data)
        return self

    def update(self, data: Dict[str, Any]):
        self.operation = "update"
        self.payload = copy.deepcopy(data)
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def limit(self, size: int):
        self.row_limit = size
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self) -> FakeResponse:
        self.db.query_count += 1
        rows = self.db.tables.setdefault(self.table, [])

        if self.operation == "insert":
            self.db.check_unique(self.table, self.payload)
            rows.append(self.payload)
            return FakeResponse([copy.deepcopy(self.payload)])

        matched = [row for row in rows if self._matches(row)]
        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse(copy.deepcopy(matched))

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda r: r.get(column) or "", reverse=desc)
        if self.row_limit is not None:
            matched = matched[:self.row_limit]
        return FakeResponse(copy.deepcopy(matched))


class FakeSupabaseDB:
    """Mock Supabase Database Service"""
    def __init__(self, unique: Optional[Dict[str, List[str]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            "projects": [],
            "inventory": [],
            "proforma_invoices": [],
        }
        self.unique = unique or {"proforma_invoices": ["id", "pi_number"]}
        self.query_count = 0

    def check_unique(self, table: str, row: Dict[str, Any]) -> None:
        for column in self.unique.get(table, []):
            if any(r.get(column) == row.get(column) for r in self.tables[table]):
                raise APIError({
                    "code": "23505",
                    "message": f'duplicate key value violates unique constraint "{table}_{column}_key"',
                    "details": f"Key ({column})=({row.get(column)}) already exists.",
                    "hint": None,
                })

    def reset_query_count(self):
        count = self.query_count
        self.query_count = 0
        return count


class FakeSupabase:
    """Fake Supabase Client exposing the table() entry point"""
    def __init__(self, url: str = "http://fake.supabase.local", key: str = "fake-key"):
        self.url = url
        self.key = key
        self.db = FakeSupabaseDB()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.db, name)

    def seed(self, table: str, rows: List[Dict[str, Any]]) -> None:
        self.db.tables.setdefault(table, []).extend(copy.deepcopy(rows))
