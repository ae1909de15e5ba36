import copy

import pytest

from expense_dashboard.db import ExpenseGateway
from expense_dashboard.rest_client import StoreResult

OWNER = 'user-1'
OTHER_OWNER = 'user-2'


def _compare(actual, op, expected):
    if op == 'eq':
        return actual == expected
    if op == 'is':
        return actual is None if expected is None else actual == expected
    if actual is None:
        return False
    if op == 'gte':
        return actual >= expected
    if op == 'lte':
        return actual <= expected
    raise ValueError(f'unsupported operator {op}')


class FakeStoreClient:
    """In-memory stand-in for StoreClient that understands the gateway's queries."""

    def __init__(self, tables=None):
        self.tables = {name: [dict(row) for row in rows] for name, rows in (tables or {}).items()}
        self.calls = []
        self.failures = {}
        self.key = 'anon-key'
        self.access_token = None
        self._next_id = 1000

    def fail_on(self, method, message='boom'):
        self.failures[method] = message

    def _record(self, method, table, **kwargs):
        self.calls.append((method, table, kwargs))
        if method in self.failures:
            return StoreResult.failure(self.failures[method], status=500)
        return None

    def calls_for(self, method):
        return [call for call in self.calls if call[0] == method]

    def _rows(self, table):
        return self.tables.setdefault(table, [])

    def _matches(self, row, filters):
        return all(_compare(row.get(column), op, value) for column, op, value in filters)

    def _embed(self, row, columns):
        if 'category(' not in columns:
            return dict(row)
        category = next(
            (c for c in self._rows('category') if c['id'] == row.get('category_id')),
            None,
        )
        return dict(row, category=dict(category) if category else None)

    def select(self, table, columns='*', *, filters=(), order=(), limit=None):
        failed = self._record('select', table, columns=columns, filters=list(filters), order=list(order), limit=limit)
        if failed:
            return failed
        rows = [self._embed(row, columns) for row in self._rows(table) if self._matches(row, filters)]
        for column, ascending in reversed(list(order)):
            rows.sort(key=lambda row: row.get(column), reverse=not ascending)
        if limit is not None:
            rows = rows[:limit]
        return StoreResult.success(rows)

    def select_maybe_single(self, table, columns='*', *, filters=()):
        result = self.select(table, columns, filters=filters, limit=2)
        if not result.ok:
            return result
        if len(result.data) > 1:
            return StoreResult.failure('Expected at most one row', code='PGRST116')
        return StoreResult.success(result.data[0] if result.data else None)

    def insert(self, table, rows, *, on_conflict=None):
        failed = self._record('insert', table, rows=copy.deepcopy(rows), on_conflict=on_conflict)
        if failed:
            return failed
        for row in rows if isinstance(rows, list) else [rows]:
            if on_conflict:
                key = [(column, 'eq', row.get(column)) for column in on_conflict]
                existing = next((r for r in self._rows(table) if self._matches(r, key)), None)
                if existing is not None:
                    existing.update(row)
                    continue
            self._next_id += 1
            self._rows(table).append(dict(row, id=self._next_id))
        return StoreResult.success(None)

    def update(self, table, values, *, filters):
        failed = self._record('update', table, values=dict(values), filters=list(filters))
        if failed:
            return failed
        for row in self._rows(table):
            if self._matches(row, filters):
                row.update(values)
        return StoreResult.success(None)

    def delete(self, table, *, filters):
        failed = self._record('delete', table, filters=list(filters))
        if failed:
            return failed
        self.tables[table] = [row for row in self._rows(table) if not self._matches(row, filters)]
        return StoreResult.success(None)


def sample_tables():
    return {
        'category': [
            {'id': 1, 'category': 'mat'},
            {'id': 2, 'category': 'inntekter'},
            {'id': 3, 'category': 'transport'},
        ],
        'expense': [
            {'id': 1, 'item': 'Lønn', 'price': 30000, 'category_id': 2, 'tag': None, 'user_id': OWNER, 'date': '2024-02-25'},
            {'id': 2, 'item': 'Middag', 'price': 450, 'category_id': 1, 'tag': 'Oslo', 'user_id': OWNER, 'date': '2024-03-02'},
            {'id': 3, 'item': 'Buss', 'price': 39, 'category_id': 3, 'tag': None, 'user_id': OWNER, 'date': '2024-03-15'},
            {'id': 4, 'item': 'Lunsj', 'price': 120, 'category_id': 1, 'tag': None, 'user_id': OWNER, 'date': '2023-12-20'},
            {'id': 5, 'item': 'Kaffe', 'price': 55, 'category_id': 1, 'tag': None, 'user_id': OTHER_OWNER, 'date': '2024-03-03'},
        ],
        'budget': [
            {'id': 10, 'category_id': 1, 'budget': 800, 'year': 2024, 'month': 2, 'user_id': OWNER},
            {'id': 11, 'category_id': 1, 'budget': 1000, 'year': 2024, 'month': 3, 'user_id': OWNER},
            {'id': 12, 'category_id': 3, 'budget': 500, 'year': 2023, 'month': 12, 'user_id': OWNER},
            {'id': 13, 'category_id': 1, 'budget': 9999, 'year': 2024, 'month': 3, 'user_id': OTHER_OWNER},
        ],
    }


@pytest.fixture
def fake_client():
    return FakeStoreClient(sample_tables())


@pytest.fixture
def gateway(fake_client):
    return ExpenseGateway(fake_client)
