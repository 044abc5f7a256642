# tests/conftest.py
import copy
import os
import sys
import tempfile
import uuid
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

# Keep test runs from writing metrics and logs into the working tree
_TMP = tempfile.mkdtemp(prefix="campus_buddy_tests_")
os.environ.setdefault("CAMPUS_BUDDY_METRICS_PATH", os.path.join(_TMP, "metrics.json"))
os.environ.setdefault("CAMPUS_BUDDY_LOG_DIR", os.path.join(_TMP, "logs"))

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fastapi.testclient import TestClient

from campus_buddy.main import app
from campus_buddy.api import routes
from campus_buddy.knowledge.store import CampusStore
from campus_buddy.llm.multi_model_client import NoProviderAvailable


# ============================================================
# IN-MEMORY SUPABASE DOUBLE
# ============================================================

_BASE_TIME = datetime(2026, 1, 1, 9, 0, 0)


class FakeResponse:

    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable stand-in for the postgrest query builder."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self._op = "select"
        self._payload = None
        self._filters = []
        self._order = None
        self._limit = None

    def select(self, *columns):
        self._op = "select"
        return self

    def insert(self, payload):
        self._op, self._payload = "insert", payload
        return self

    def update(self, payload):
        self._op, self._payload = "update", payload
        return self

    def upsert(self, payload):
        self._op, self._payload = "upsert", payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row):
        return all(str(row.get(c)) == str(v) for c, v in self._filters)

    def execute(self):

        if self.table in self.db.failing_tables:
            raise Exception(f"relation {self.table} unavailable")

        rows = self.db.tables.setdefault(self.table, [])

        if self._op == "insert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            return FakeResponse([copy.deepcopy(self.db.add_row(self.table, p)) for p in payload])

        if self._op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self._payload)
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        if self._op == "upsert":
            key = "user_id" if "user_id" in self._payload else "id"
            for row in rows:
                if row.get(key) == self._payload.get(key):
                    row.update(self._payload)
                    return FakeResponse([copy.deepcopy(row)])
            return FakeResponse([copy.deepcopy(self.db.add_row(self.table, self._payload))])

        if self._op == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResponse(copy.deepcopy(removed))

        result = [r for r in rows if self._matches(r)]

        if self._order:
            column, desc = self._order
            result = sorted(result, key=lambda r: r.get(column) or "", reverse=desc)

        if self._limit is not None:
            result = result[: self._limit]

        return FakeResponse(copy.deepcopy(result))


class FakeBucket:

    def __init__(self, db, name):
        self.db = db
        self.name = name

    def download(self, path):
        if path not in self.db.files:
            raise Exception(f"Object not found: {path}")
        return self.db.files[path]

    def upload(self, path, data, file_options=None):
        if self.db.storage_fails:
            raise Exception("storage unavailable")
        self.db.files[path] = data
        self.db.uploads.append((path, file_options))
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://fake.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeAdmin:

    def __init__(self, db):
        self.db = db

    def list_users(self, page=None, per_page=None):
        page = page or 1
        per_page = per_page or 50
        start = (page - 1) * per_page
        return self.db.users[start:start + per_page]

    def create_user(self, attributes):
        if self.db.create_user_error:
            raise Exception(self.db.create_user_error)
        user = SimpleNamespace(
            id=str(uuid.uuid4()),
            email=attributes["email"],
            user_metadata=attributes.get("user_metadata", {}),
        )
        self.db.users.append(user)
        self.db.created_users.append(attributes)
        return SimpleNamespace(user=user)


class FakeSupabase:

    def __init__(self):
        self.tables = {}
        self.files = {}
        self.uploads = []
        self.users = []
        self.created_users = []
        self.failing_tables = set()
        self.storage_fails = False
        self.create_user_error = None
        self._clock = 0

        self.storage = SimpleNamespace(from_=lambda name: FakeBucket(self, name))
        self.auth = SimpleNamespace(admin=FakeAdmin(self))

    def table(self, name):
        return FakeQuery(self, name)

    def add_row(self, table, payload):
        self._clock += 1
        row = dict(payload)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", (_BASE_TIME + timedelta(seconds=self._clock)).isoformat())
        self.tables.setdefault(table, []).append(row)
        return row


# ============================================================
# FAKE AI CLIENTS
# ============================================================

class FakeLLM:

    def __init__(self, answer="The library opens at 8 AM.", provider="mistral"):
        self.answer = answer
        self.provider = provider
        self.error = None
        self.prompts = []

    def generate_with_provider(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.answer, self.provider

    def get_usage_stats(self):
        return {"mistral_available": True, "gemini_available": True}


class FakeDocumentAI:

    available = True

    def __init__(self):
        self.structured = []
        self.ocr_calls = []

    def structure_document(self, content, file_type, file_name):
        self.structured.append((content, file_type, file_name))
        return f"STRUCTURED: {content}", True

    def ocr_image(self, image_bytes, file_name, mime_type="image/jpeg"):
        self.ocr_calls.append((image_bytes, file_name, mime_type))
        return f"Image Document: {file_name}\n\nExtracted Content:\nBus timetable", True


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def store(fake_db):
    return CampusStore(client=fake_db, service_client=fake_db)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_document_ai():
    return FakeDocumentAI()


@pytest.fixture
def client(monkeypatch, store, fake_llm, fake_document_ai):
    """
    FastAPI test client wired to the in-memory backend.
    """
    monkeypatch.setattr(routes, "store", store)
    monkeypatch.setattr(routes, "llm_client", fake_llm)
    monkeypatch.setattr(routes, "document_ai", fake_document_ai)

    return TestClient(app)


@pytest.fixture
def faculty(fake_db):
    """A faculty profile; returns headers identifying that user."""
    fake_db.add_row("profiles", {
        "user_id": "faculty-1",
        "full_name": "Faculty Admin",
        "email": "keystone",
        "user_type": "faculty",
    })
    return {"X-User-Id": "faculty-1"}


@pytest.fixture
def student(fake_db):
    fake_db.add_row("profiles", {
        "user_id": "student-1",
        "full_name": "Asha Rao",
        "email": "asha@example.edu",
        "user_type": "student",
    })
    return {"X-User-Id": "student-1"}


@pytest.fixture
def seed_college_data(fake_db):

    def _seed(**overrides):
        row = {
            "title": "Computer Lab Location",
            "category": "Labs",
            "content": "The computer lab is in Block B, room 204.",
            "tags": ["lab", "computers"],
        }
        row.update(overrides)
        return fake_db.add_row("college_data", row)

    return _seed


@pytest.fixture
def no_provider_error():
    return NoProviderAvailable("All LLM backends failed: mistral: timeout; gemini: quota")


@pytest.fixture
def unconfigured_store(monkeypatch):
    """A real CampusStore with no Supabase credentials available."""
    from campus_buddy.knowledge import supabase_client

    monkeypatch.setattr(supabase_client, "SUPABASE_URL", "")
    supabase_client.get_supabase_client.cache_clear()

    yield CampusStore()

    supabase_client.get_supabase_client.cache_clear()
