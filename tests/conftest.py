import sys
from datetime import datetime, timedelta
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from rfi_tracker.backend.base import BackendError


class FakeBackend:
    """In-memory backend that records every call and can be told to fail."""

    def __init__(self):
        self.tables = {"projects": [], "rfis": [], "users": []}
        self.calls = []
        self.failures = {}
        self.user = None
        self.accounts = {}
        self._next_id = 1
        self._clock = datetime(2024, 1, 1, 9, 0, 0)

    def fail(self, op, table=None, message="boom"):
        self.failures[(op, table)] = message

    def _record(self, op, table=None):
        self.calls.append((op, table))
        message = self.failures.get((op, table))
        if message:
            raise BackendError(message, 500)

    def _stamp(self):
        self._clock += timedelta(minutes=1)
        return self._clock

    def sign_up(self, email, password):
        self._record("sign_up")
        if email in self.accounts:
            raise BackendError("User already registered", 422)
        user = {"id": f"user-{len(self.accounts) + 1}", "email": email}
        self.accounts[email] = (password, user)
        self.user = user
        return user

    def sign_in(self, email, password):
        self._record("sign_in")
        stored = self.accounts.get(email)
        if stored is None or stored[0] != password:
            raise BackendError("Invalid login credentials", 400)
        self.user = stored[1]
        return self.user

    def sign_out(self):
        self._record("sign_out")
        self.user = None

    def get_user(self):
        self._record("get_user")
        return self.user

    def _matches(self, row, filters):
        return all(row.get(k) == v for k, v in (filters or {}).items())

    def select(self, table, filters=None):
        self._record("select", table)
        return [dict(row) for row in self.tables[table] if self._matches(row, filters)]

    def insert(self, table, rows):
        self._record("insert", table)
        created = []
        for row in rows:
            stored = dict(row)
            if table != "users":
                stored.setdefault("id", self._next_id)
                stored.setdefault("created_at", self._stamp().isoformat())
                self._next_id += 1
            self.tables[table].append(stored)
            created.append(dict(stored))
        return created

    def update(self, table, filters, patch):
        self._record("update", table)
        changed = []
        for row in self.tables[table]:
            if self._matches(row, filters):
                row.update(patch)
                changed.append(dict(row))
        return changed

    def delete(self, table, filters):
        self._record("delete", table)
        self.tables[table] = [row for row in self.tables[table] if not self._matches(row, filters)]

    def close(self):
        pass


@pytest.fixture
def fake_backend():
    return FakeBackend()
