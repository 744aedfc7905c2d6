# app/store/test_firestore_store.py
"""
Firestore 문서 저장소 테스트 (Firestore 클라이언트는 MagicMock으로 대체)

사용법: python -m pytest app/store/test_firestore_store.py -v
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from app.store.base import Increment, QuerySpec, SERVER_TIMESTAMP
from app.store.firestore_store import FirestoreDocumentStore, _to_firestore


def make_doc(doc_id, path, data):
    doc = MagicMock()
    doc.id = doc_id
    doc.reference.path = path
    doc.exists = data is not None
    doc.to_dict.return_value = data
    return doc


@pytest.fixture
def db():
    return MagicMock()


@pytest.fixture
def store(db):
    return FirestoreDocumentStore(db=db)


def test_sentinels_are_converted():
    naive = datetime(2024, 5, 1, 12, 0)
    converted = _to_firestore({
        "createdAt": SERVER_TIMESTAMP,
        "likes": Increment(-1),
        "editedAt": naive,
        "title": "Alpha",
    })

    assert converted["createdAt"] is firestore.SERVER_TIMESTAMP
    assert isinstance(converted["likes"], firestore.Increment)
    assert converted["likes"].value == -1
    assert converted["editedAt"] == naive.replace(tzinfo=timezone.utc)
    assert converted["title"] == "Alpha"


def test_get_wraps_snapshot(store, db):
    db.document.return_value.get.return_value = make_doc("p1", "posts/p1", {"title": "Alpha", "likes": 3})

    snapshot = store.get("posts/p1")

    db.document.assert_called_with("posts/p1")
    assert snapshot.exists
    assert snapshot.id == "p1"
    assert snapshot.path == "posts/p1"
    assert snapshot.to_dict() == {"title": "Alpha", "likes": 3}


def test_missing_document_has_no_data(store, db):
    db.document.return_value.get.return_value = make_doc("nope", "posts/nope", None)
    assert not store.get("posts/nope").exists


def test_add_converts_and_returns_id(store, db):
    db.collection.return_value.add.return_value = (None, MagicMock(id="new-id"))

    assert store.add("posts", {"createdAt": SERVER_TIMESTAMP}) == "new-id"
    db.collection.assert_called_with("posts")
    (data,), _ = db.collection.return_value.add.call_args
    assert data["createdAt"] is firestore.SERVER_TIMESTAMP


def test_update_converts_increment(store, db):
    store.update("posts/p1", {"likes": Increment(1)})

    (data,), _ = db.document.return_value.update.call_args
    assert isinstance(data["likes"], firestore.Increment)
    assert data["likes"].value == 1


def test_query_builds_filter_order_and_limit(store, db):
    collection = db.collection.return_value
    filtered = collection.where.return_value
    ordered = filtered.order_by.return_value
    limited = ordered.limit.return_value
    limited.stream.return_value = [make_doc("p1", "posts/p1", {"authorId": "alice"})]

    results = store.query(QuerySpec("posts", filters=[("authorId", "==", "alice")],
                                    order_by="createdAt", descending=True, limit=20))

    db.collection.assert_called_with("posts")
    field_filter = collection.where.call_args.kwargs["filter"]
    assert isinstance(field_filter, FieldFilter)
    assert (field_filter.field_path, field_filter.op_string, field_filter.value) == ("authorId", "==", "alice")
    filtered.order_by.assert_called_once_with("createdAt", direction=firestore.Query.DESCENDING)
    ordered.limit.assert_called_once_with(20)
    assert [r.id for r in results] == ["p1"]


def test_query_without_order_or_limit(store, db):
    collection = db.collection.return_value
    collection.stream.return_value = []

    assert store.query(QuerySpec("posts/p1/replies")) == []
    collection.where.assert_not_called()
    collection.order_by.assert_not_called()
    collection.limit.assert_not_called()


def test_batch_update_splits_into_chunks_of_500(store, db):
    batch = db.batch.return_value
    updates = [(f"users/u/notifications/n{i}", {"read": True}) for i in range(501)]

    store.batch_update(updates)

    assert db.batch.call_count == 2
    assert batch.commit.call_count == 2
    assert batch.update.call_count == 501


def test_run_transaction_uses_transactional_wrapper(store, db, monkeypatch):
    wrapped = []

    def fake_transactional(fn):
        wrapped.append(fn)
        return fn

    monkeypatch.setattr(firestore, "transactional", fake_transactional)
    native = db.transaction.return_value
    db.document.return_value.get.return_value = make_doc("p1", "posts/p1", {"likes": 2})

    def _bump(transaction):
        current = transaction.get("posts/p1").to_dict()["likes"]
        transaction.update("posts/p1", {"likes": Increment(1)})
        transaction.delete("posts/p1/likes/bob")
        return current + 1

    assert store.run_transaction(_bump) == 3
    assert len(wrapped) == 1
    db.document.return_value.get.assert_called_with(transaction=native)
    (_, data), _ = native.update.call_args
    assert data["likes"].value == 1
    native.delete.assert_called_once()


def test_watch_adapts_snapshots_and_unsubscribes(store, db):
    query = db.collection.return_value.order_by.return_value
    received = []

    subscription = store.watch(QuerySpec("users/alice/notifications", order_by="createdAt", descending=True),
                               received.append)

    (on_snapshot,), _ = query.on_snapshot.call_args
    on_snapshot([make_doc("n1", "users/alice/notifications/n1", {"read": False})], [], None)
    assert [[s.id for s in batch] for batch in received] == [["n1"]]

    subscription.unsubscribe()
    query.on_snapshot.return_value.unsubscribe.assert_called_once()


def test_watch_callback_errors_are_logged_not_raised(store, db):
    query = db.collection.return_value

    def _broken(snapshots):
        raise RuntimeError("render failed")

    store.watch(QuerySpec("users/alice/notifications"), _broken)
    (on_snapshot,), _ = query.on_snapshot.call_args
    on_snapshot([], [], None)
