"""
In-memory stand-in for the Supabase client used by the API tests.

Only the query-builder calls the services make are supported. Rows are
plain dicts; ids and created_at are filled in on insert.
"""
import copy
import itertools
from datetime import datetime, timezone
from types import SimpleNamespace


def _as_comparable(value):
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return value


def _compare(left, right, op):
    if left is None or right is None:
        return False
    left, right = _as_comparable(left), _as_comparable(right)
    try:
        return op(left, right)
    except TypeError:
        return op(str(left), str(right))


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.filters = []
        self.action = "select"
        self.payload = None
        self.order_by = []
        self.limit_count = None
        self.offset_count = 0

    # Builder steps
    def select(self, *columns, **kwargs):
        self.action = "select"
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def _filter(self, predicate):
        self.filters.append(predicate)
        return self

    def eq(self, column, value):
        return self._filter(lambda row: row.get(column) == value)

    def neq(self, column, value):
        return self._filter(lambda row: row.get(column) is not None and row.get(column) != value)

    def in_(self, column, values):
        values = list(values)
        return self._filter(lambda row: row.get(column) in values)

    def is_(self, column, value):
        if value in ("null", None):
            return self._filter(lambda row: row.get(column) is None)
        return self._filter(lambda row: row.get(column) is value)

    def gt(self, column, value):
        return self._filter(lambda row: _compare(row.get(column), value, lambda a, b: a > b))

    def gte(self, column, value):
        return self._filter(lambda row: _compare(row.get(column), value, lambda a, b: a >= b))

    def lt(self, column, value):
        return self._filter(lambda row: _compare(row.get(column), value, lambda a, b: a < b))

    def lte(self, column, value):
        return self._filter(lambda row: _compare(row.get(column), value, lambda a, b: a <= b))

    def order(self, column, desc=False, **kwargs):
        self.order_by.append((column, desc))
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def offset(self, count):
        self.offset_count = count
        return self

    def _matches(self, row):
        return all(predicate(row) for predicate in self.filters)

    def execute(self):
        if self.db.fail_tables.get(self.table):
            raise RuntimeError(f"storage failure on {self.table}")
        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in payload:
                row = copy.deepcopy(item)
                row.setdefault("id", next(self.db.ids[self.table]))
                row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
                rows.append(row)
                created.append(copy.deepcopy(row))
            return SimpleNamespace(data=created)

        matched = [row for row in rows if self._matches(row)]

        if self.action == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return SimpleNamespace(data=copy.deepcopy(matched))

        if self.action == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return SimpleNamespace(data=copy.deepcopy(matched))

        result = list(matched)
        for column, desc in reversed(self.order_by):
            present = [r for r in result if r.get(column) is not None]
            missing = [r for r in result if r.get(column) is None]
            present.sort(key=lambda r: _as_comparable(r.get(column)), reverse=desc)
            result = present + missing
        result = result[self.offset_count:]
        if self.limit_count is not None:
            result = result[:self.limit_count]
        return SimpleNamespace(data=copy.deepcopy(result))


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.ids = {}
        self.fail_tables = {}

    def table(self, name):
        self.ids.setdefault(name, itertools.count(1))
        return FakeQuery(self, name)

    def seed(self, table, *rows):
        """Insert rows directly and return them with their ids"""
        return [self.table(table).insert(row).execute().data[0] for row in rows]

    def rows(self, table):
        return self.tables.get(table, [])
