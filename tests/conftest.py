"""Shared test fixtures and configuration."""
import copy
import operator
import os
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from google.api_core.exceptions import NotFound
from google.cloud.firestore import Query

from campus_admin.core.database import get_db  # noqa: E402
from campus_admin.core.exceptions import UnauthorizedException  # noqa: E402
from campus_admin.core.rate_limit import limiter  # noqa: E402
from campus_admin.core.security import (  # noqa: E402
    CallerContext,
    IdentityVerifier,
    get_identity_verifier,
    identity_from_claims,
)
from campus_admin.main import app  # noqa: E402

_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda value, options: value in options,
}

# ===== In-memory document store =====

class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict[str, Any]]):
        self.id = doc_id
        self._data = copy.deepcopy(data)

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data)

class FakeDocument:
    def __init__(self, store: "FakeFirestore", collection: str, doc_id: str):
        self._store = store
        self._collection = collection
        self.id = doc_id

    async def get(self) -> FakeSnapshot:
        self._store.check(self._collection, "get")
        return FakeSnapshot(self.id, self._store.data[self._collection].get(self.id))

    async def set(self, data: Dict[str, Any], merge: bool = False) -> None:
        self._store.check(self._collection, "set")
        docs = self._store.data[self._collection]
        if merge and self.id in docs:
            docs[self.id].update(copy.deepcopy(data))
        else:
            docs[self.id] = copy.deepcopy(data)

    async def update(self, data: Dict[str, Any]) -> None:
        self._store.check(self._collection, "update")
        docs = self._store.data[self._collection]
        if self.id not in docs:
            raise NotFound(f"No document to update: {self._collection}/{self.id}")
        docs[self.id].update(copy.deepcopy(data))

    async def delete(self) -> None:
        self._store.check(self._collection, "delete")
        self._store.data[self._collection].pop(self.id, None)

class FakeQuery:
    def __init__(self, store, collection, filters=(), orders=(), limit_count=None):
        self._store = store
        self._collection = collection
        self._filters = filters
        self._orders = orders
        self._limit = limit_count

    def where(self, *, filter):
        return FakeQuery(
            self._store, self._collection,
            self._filters + (filter,), self._orders, self._limit,
        )

    def order_by(self, field_path: str, direction: str = Query.ASCENDING):
        return FakeQuery(
            self._store, self._collection,
            self._filters, self._orders + ((field_path, direction),), self._limit,
        )

    def limit(self, count: int):
        return FakeQuery(self._store, self._collection, self._filters, self._orders, count)

    def _matches(self, data: Dict[str, Any]) -> bool:
        for field_filter in self._filters:
            if field_filter.field_path not in data:
                return False
            compare = _OPERATORS[field_filter.op_string]
            if not compare(data[field_filter.field_path], field_filter.value):
                return False
        return True

    async def stream(self):
        self._store.check(self._collection, "stream")
        rows = [
            (doc_id, data)
            for doc_id, data in self._store.data[self._collection].items()
            if self._matches(data)
        ]
        # Documents without an ordered field are left out, as Firestore does
        for field_path, _ in self._orders:
            rows = [row for row in rows if row[1].get(field_path) is not None]
        for field_path, direction in reversed(self._orders):
            rows.sort(key=lambda row: row[1][field_path], reverse=direction == Query.DESCENDING)
        if self._limit is not None:
            rows = rows[:self._limit]
        for doc_id, data in rows:
            yield FakeSnapshot(doc_id, data)

class FakeCollection(FakeQuery):
    def __init__(self, store, collection):
        super().__init__(store, collection)

    def document(self, doc_id: Optional[str] = None) -> FakeDocument:
        return FakeDocument(self._store, self._collection, doc_id or uuid.uuid4().hex)

    async def add(self, data: Dict[str, Any]):
        ref = self.document()
        await ref.set(data)
        return None, ref

class FakeFirestore:
    """Just enough of the Firestore AsyncClient surface for the services"""

    def __init__(self):
        self.data: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        self.failures: Dict[tuple, Exception] = {}

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    def fail(self, collection: str, op: str, exc: Exception) -> None:
        self.failures[(collection, op)] = exc

    def check(self, collection: str, op: str) -> None:
        exc = self.failures.get((collection, op))
        if exc is not None:
            raise exc

    def docs(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self.data[collection]

# ===== Identity provider =====

class FakeIdentityVerifier(IdentityVerifier):
    """Token table instead of Firebase Auth"""

    def __init__(self):
        super().__init__(app=object())
        self.tokens: Dict[str, Dict[str, Any]] = {}
        self.emails: Dict[str, str] = {}
        self.claims: Dict[str, Dict[str, bool]] = {}
        self.claims_error: Optional[Exception] = None

    def issue(self, uid: str, admin: bool = True, superadmin: bool = False, **extra) -> str:
        token = f"token-{uid}"
        self.tokens[token] = {"uid": uid, "admin": admin, "superadmin": superadmin, **extra}
        return token

    async def verify(self, token: str):
        decoded = self.tokens.get(token)
        if decoded is None:
            raise UnauthorizedException("Invalid token", error_code="INVALID_TOKEN")
        return identity_from_claims(decoded)

    async def lookup_uid_by_email(self, email: str) -> Optional[str]:
        return self.emails.get(email)

    async def set_admin_claims(self, uid: str, admin: bool, superadmin: bool = False) -> None:
        if self.claims_error is not None:
            raise self.claims_error
        self.claims[uid] = {"admin": admin, "superadmin": superadmin}

# ===== Fixtures =====

@pytest.fixture
def anyio_backend():
    return "asyncio"

@pytest.fixture
def db() -> FakeFirestore:
    return FakeFirestore()

@pytest.fixture
def verifier() -> FakeIdentityVerifier:
    return FakeIdentityVerifier()

@pytest.fixture(autouse=True)
def disable_rate_limits():
    limiter.enabled = False
    limiter.reset()
    yield
    limiter.enabled = False
    limiter.reset()

@pytest.fixture
def client(db, verifier):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()

def seed_user(db: FakeFirestore, uid: str, name: Optional[str] = None, **fields) -> Dict[str, Any]:
    profile = {
        "name": name if name is not None else uid.title(),
        "email": f"{uid}@campus.test",
        "program": "BSCS",
        "createdAt": datetime.now(timezone.utc),
        "isBanned": False,
        **fields,
    }
    db.data["users"][uid] = profile
    return profile

def seed_admin(
    db: FakeFirestore,
    uid: str,
    role: str = "moderator",
    status: str = "active",
    **fields,
) -> Dict[str, Any]:
    if uid not in db.data["users"]:
        seed_user(db, uid)
    record = {
        "uid": uid,
        "name": db.data["users"][uid]["name"],
        "email": db.data["users"][uid]["email"],
        "role": role,
        "status": status,
        "promotedAt": datetime.now(timezone.utc),
        "permissions": {},
        **fields,
    }
    db.data["admins"][uid] = record
    return record

def auth_headers(verifier: FakeIdentityVerifier, uid: str, **claims) -> Dict[str, str]:
    return {"Authorization": f"Bearer {verifier.issue(uid, **claims)}"}

def caller(uid: str = "root", role: str = "superadmin", name: str = "Root Admin") -> CallerContext:
    return CallerContext(uid=uid, email=f"{uid}@campus.test", name=name, role=role, status="active")

@pytest.fixture
def superadmin(db, verifier) -> Dict[str, str]:
    """Seeded superadmin 'root' and its request headers"""
    seed_admin(db, "root", role="superadmin")
    db.data["users"]["root"]["name"] = "Root Admin"
    db.data["admins"]["root"]["name"] = "Root Admin"
    return auth_headers(verifier, "root", superadmin=True)

@pytest.fixture
def moderator(db, verifier) -> Dict[str, str]:
    """Seeded moderator 'mod' and its request headers"""
    seed_admin(db, "mod", role="moderator")
    return auth_headers(verifier, "mod")
