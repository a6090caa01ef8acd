"""ChatStore query construction against an in-memory Firestore stand-in."""

from typing import Any, Optional

import pytest
from google.api_core import exceptions as gexc
from google.cloud import firestore

from kindroid_ai.errors import StoreError
from kindroid_ai.store import ChatStore


class Snapshot:
    def __init__(self, id: str, data: Optional[dict[str, Any]]):
        self.id = id
        self._data = data
        self.exists = data is not None

    def to_dict(self) -> Optional[dict[str, Any]]:
        return dict(self._data) if self._data is not None else None


class DocumentRef:
    def __init__(self, db: "FirestoreStub", path: str, doc_id: str):
        self._db = db
        self._path = path
        self._doc_id = doc_id

    async def get(self) -> Snapshot:
        self._db.calls.append(("get", self._path, self._doc_id))
        if self._db.error:
            raise self._db.error
        for snap in self._db.docs.get(self._path, []):
            if snap.id == self._doc_id:
                return snap
        return Snapshot(self._doc_id, None)


class Query:
    def __init__(self, db: "FirestoreStub", path: str):
        self._db = db
        self._path = path

    def order_by(self, field: str, direction: str) -> "Query":
        self._db.calls.append(("order_by", field, direction))
        return self

    def limit(self, count: int) -> "Query":
        self._db.calls.append(("limit", count))
        return self

    def document(self, doc_id: str) -> DocumentRef:
        self._db.calls.append(("document", doc_id))
        return DocumentRef(self._db, self._path, doc_id)

    async def stream(self):
        if self._db.error:
            raise self._db.error
        for snap in self._db.docs.get(self._path, []):
            yield snap


class FirestoreStub:
    def __init__(self, docs: Optional[dict[str, list[Snapshot]]] = None):
        self.docs = docs or {}
        self.calls: list[tuple] = []
        self.error: Optional[Exception] = None
        self.closed = False

    def collection(self, path: str) -> Query:
        self.calls.append(("collection", path))
        return Query(self, path)

    async def close(self) -> None:
        self.closed = True


PATH = "Users/u1/AIs/ai1/ChatMessages"


@pytest.mark.asyncio
async def test_list_messages_query_shape():
    db = FirestoreStub({PATH: [
        Snapshot("m2", {"sender": "ai", "message": "newer", "timestamp": 2}),
        Snapshot("m1", {"sender": "user", "message": "older", "timestamp": 1}),
    ]})
    store = ChatStore(token="t", client=db)

    docs = await store.list_messages("u1", "ai1", 7)

    assert db.calls == [
        ("collection", PATH),
        ("order_by", "timestamp", firestore.Query.DESCENDING),
        ("limit", 7),
    ]
    assert [d["id"] for d in docs] == ["m2", "m1"]
    assert docs[0] == {"id": "m2", "sender": "ai", "message": "newer", "timestamp": 2}


@pytest.mark.asyncio
async def test_get_message_point_lookup():
    db = FirestoreStub({PATH: [Snapshot("m1", {"sender": "ai", "message": "hi"})]})
    store = ChatStore(token="t", client=db)

    doc = await store.get_message("u1", "ai1", "m1")

    assert doc == {"id": "m1", "sender": "ai", "message": "hi"}
    assert db.calls == [("collection", PATH), ("document", "m1"), ("get", PATH, "m1")]


@pytest.mark.asyncio
async def test_get_missing_message_returns_none():
    store = ChatStore(token="t", client=FirestoreStub())
    assert await store.get_message("u1", "ai1", "nope") is None


@pytest.mark.asyncio
async def test_list_permission_denied_becomes_store_error():
    db = FirestoreStub()
    db.error = gexc.PermissionDenied("missing or insufficient permissions")
    store = ChatStore(token="t", client=db)
    with pytest.raises(StoreError):
        await store.list_messages("u1", "ai1", 10)


@pytest.mark.asyncio
async def test_get_permission_denied_becomes_store_error():
    db = FirestoreStub()
    db.error = gexc.PermissionDenied("missing or insufficient permissions")
    store = ChatStore(token="t", client=db)
    with pytest.raises(StoreError) as exc:
        await store.get_message("u1", "ai1", "m1")
    assert exc.value.details == {"message_id": "m1"}


@pytest.mark.asyncio
async def test_close_closes_client():
    db = FirestoreStub()
    await ChatStore(token="t", client=db).close()
    assert db.closed
