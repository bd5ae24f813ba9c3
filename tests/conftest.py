# tests/conftest.py
import asyncio
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from docqa.main import app
from docqa.database.supabase_client import get_supabase, get_service_supabase
from docqa.modules.auth.service import clear_auth_cache
from docqa.modules.qa.pipeline import RetrievalPipeline
from docqa.modules.qa.routes import get_retrieval_pipeline


# ---------------------------------------------------------------------------
# In-memory Supabase client
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable stand-in for the PostgREST query builder."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self._order = None
        self._limit = None
        self._offset = 0
        self._single = None

    def select(self, *columns):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def upsert(self, payload):
        self.op, self.payload = "upsert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def ilike(self, column, pattern):
        needle = pattern.strip("%").lower()
        self.filters.append(lambda row: needle in (row.get(column) or "").lower())
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def offset(self, n):
        self._offset = n
        return self

    def single(self):
        self._single = "single"
        return self

    def maybe_single(self):
        self._single = "maybe"
        return self

    def execute(self):
        if self.table in self.db.failing_tables:
            raise Exception(f"relation {self.table} is unavailable")
        rows = self.db.tables.setdefault(self.table, [])
        matched = [row for row in rows if all(f(row) for f in self.filters)]

        if self.op == "select":
            if self._order:
                column, desc = self._order
                matched = sorted(matched, key=lambda row: str(row.get(column) or ""), reverse=desc)
            matched = matched[self._offset:]
            if self._limit is not None:
                matched = matched[:self._limit]
            data = [dict(row) for row in matched]
            if self._single == "maybe":
                return FakeResponse(data[0] if data else None)
            if self._single == "single":
                if len(data) != 1:
                    raise Exception("JSON object requested, multiple (or no) rows returned")
                return FakeResponse(data[0])
            return FakeResponse(data)

        if self.op == "insert":
            if self.table in self.db.failing_inserts:
                raise Exception(f"insert into {self.table} rejected")
            row = {
                "id": str(uuid.uuid4()),
                "created_at": datetime.now(timezone.utc).isoformat(),
                **self.payload,
            }
            rows.append(row)
            return FakeResponse([dict(row)])

        if self.op == "upsert":
            existing = next((row for row in rows if row.get("id") == self.payload.get("id")), None)
            if existing is None:
                existing = {"created_at": datetime.now(timezone.utc).isoformat()}
                rows.append(existing)
            existing.update(self.payload)
            return FakeResponse([dict(existing)])

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])

        if self.op == "delete":
            for row in matched:
                rows.remove(row)
            return FakeResponse([dict(row) for row in matched])

        raise AssertionError(f"unsupported operation {self.op}")


class FakeRpc:
    def __init__(self, db, name, params):
        self.db, self.name, self.params = db, name, params

    def execute(self):
        self.db.rpc_calls.append((self.name, self.params))
        if self.db.rpc_error:
            raise Exception(self.db.rpc_error)
        return FakeResponse(None)


class FakeBucket:
    def __init__(self, storage, bucket):
        self.storage = storage
        self.bucket = bucket

    def _files(self):
        if self.bucket not in self.storage.buckets:
            raise Exception("Bucket not found")
        return self.storage.buckets[self.bucket]

    def download(self, path):
        self.storage.download_calls += 1
        if self.storage.download_failures > 0:
            self.storage.download_failures -= 1
            raise Exception("network error")
        files = self._files()
        if path not in files:
            raise Exception("Object not found")
        return files[path]

    def upload(self, path, file, file_options=None):
        files = self._files()
        if path in self.storage.upload_failures:
            raise Exception("upstream connect error")
        if path in files and (file_options or {}).get("upsert") != "true":
            raise Exception("The resource already exists")
        files[path] = file
        return SimpleNamespace(path=path, full_path=f"{self.bucket}/{path}")

    def remove(self, paths):
        files = self._files()
        return [{"name": p} for p in paths if files.pop(p, None) is not None]

    def create_signed_url(self, path, expires_in):
        url = f"https://storage.test/{self.bucket}/{path}?token=signed&expires_in={expires_in}"
        return {"signedURL": url, "signedUrl": url}


class FakeStorage:
    def __init__(self):
        self.buckets = {}
        self.created_buckets = []
        self.deleted_buckets = []
        self.download_calls = 0
        self.download_failures = 0
        self.upload_failures = set()

    def list_buckets(self):
        return [SimpleNamespace(id=name, name=name) for name in self.buckets]

    def create_bucket(self, id, name=None, options=None):
        self.buckets.setdefault(id, {})
        self.created_buckets.append((id, options))

    def empty_bucket(self, id):
        self.buckets[id] = {}

    def delete_bucket(self, id):
        self.buckets.pop(id, None)
        self.deleted_buckets.append(id)

    def from_(self, bucket):
        return FakeBucket(self, bucket)


def make_auth_user(user_id, email, metadata=None, app_metadata=None):
    return SimpleNamespace(
        id=user_id,
        email=email,
        user_metadata=metadata or {},
        app_metadata=app_metadata or {},
    )


class FakeAuth:
    def __init__(self):
        self.users_by_token = {}
        self.passwords = {}
        self.registered = {}
        self.sign_up_calls = []
        self.get_user_calls = 0
        self.signed_out = False

    def add_user(self, user, token=None, password=None):
        self.registered[user.email] = user
        if token:
            self.users_by_token[token] = user
        if password:
            self.passwords[user.email] = password

    def get_user(self, jwt=None):
        self.get_user_calls += 1
        user = self.users_by_token.get(jwt)
        if user is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=user)

    def sign_in_with_password(self, credentials):
        email = credentials["email"]
        if self.passwords.get(email) != credentials["password"]:
            raise Exception("Invalid login credentials")
        user = self.registered[email]
        return SimpleNamespace(user=user, session=SimpleNamespace(access_token=f"token-{user.id}"))

    def sign_up(self, credentials):
        self.sign_up_calls.append(credentials)
        email = credentials["email"]
        if email in self.registered:
            raise Exception("User already registered")
        user = make_auth_user(str(uuid.uuid4()), email, credentials.get("options", {}).get("data"))
        self.add_user(user, password=credentials["password"])
        return SimpleNamespace(user=user, session=None)

    def sign_out(self):
        self.signed_out = True


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failing_tables = set()
        self.failing_inserts = set()
        self.rpc_calls = []
        self.rpc_error = None
        self.storage = FakeStorage()
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_supabase():
    """Supabase double seeded with one admin and one regular user."""
    db = FakeSupabase()
    db.auth.add_user(make_auth_user("admin-id", "admin@example.com"), token="admin-token", password="secret")
    db.auth.add_user(make_auth_user("user-id", "user@example.com"), token="user-token", password="secret")
    db.tables["profiles"] = [
        {"id": "admin-id", "email": "admin@example.com", "name": "Ana Admin", "role": "admin",
         "status": "activo", "avatar": None, "created_at": "2024-01-01T00:00:00+00:00"},
        {"id": "user-id", "email": "user@example.com", "name": "Bruno User", "role": "user",
         "status": "vacaciones", "avatar": None, "created_at": "2024-01-02T00:00:00+00:00"},
    ]
    return db


@pytest.fixture
def llm_responses():
    """Responses the fake chat model returns, in order. Tests replace the contents."""
    return ["respuesta"]


@pytest.fixture
def fake_pipeline(llm_responses):
    return RetrievalPipeline(
        embeddings=DeterministicFakeEmbedding(size=32),
        llm_factory=lambda temperature: FakeListChatModel(responses=list(llm_responses)),
    )


@pytest.fixture
def client(fake_supabase, fake_pipeline):
    """FastAPI test client wired to the in-memory Supabase and fake models."""
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_service_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_retrieval_pipeline] = lambda: fake_pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": "Bearer admin-token"}


@pytest.fixture
def user_headers():
    return {"Authorization": "Bearer user-token"}


@pytest.fixture(autouse=True)
def reset_state(monkeypatch):
    """Clear the auth cache and keep token counting offline."""
    clear_auth_cache()
    monkeypatch.setattr(
        "docqa.modules.qa.service.count_tokens",
        lambda text, model=None: len(text.split()),
    )
    yield
    clear_auth_cache()


@pytest.fixture
def make_pdf():
    """Build a one-page PDF whose content stream draws the given text."""
    def _make(text: str) -> bytes:
        content = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
        objects = [
            b"<< /Type /Catalog /Pages 2 0 R >>",
            b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
            b"/Resources << /Font << /F1 5 0 R >> >> >>",
            b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
            b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        ]
        out = bytearray(b"%PDF-1.4\n")
        offsets = []
        for number, body in enumerate(objects, start=1):
            offsets.append(len(out))
            out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
        xref_offset = len(out)
        out += b"xref\n0 %d\n" % (len(objects) + 1)
        out += b"0000000000 65535 f \n"
        for offset in offsets:
            out += b"%010d 00000 n \n" % offset
        out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_offset)
        return bytes(out)
    return _make


class ScriptedChain:
    """Chain double: each ainvoke call plays the next step of the script.

    A step is an answer string, an exception to raise, or "hang" to block
    until cancelled.
    """

    def __init__(self, script):
        self.script = list(script)
        self.calls = []
        self.cancelled = 0

    async def ainvoke(self, query):
        self.calls.append(query)
        step = self.script.pop(0) if self.script else "ok"
        if step == "hang":
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if isinstance(step, Exception):
            raise step
        return step


@pytest.fixture
def scripted_chain():
    return ScriptedChain


@pytest.fixture
def auth_user():
    return make_auth_user
