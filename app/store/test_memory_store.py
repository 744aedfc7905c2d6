# app/store/test_memory_store.py
"""
메모리 문서 저장소 테스트

사용법: python -m pytest app/store/test_memory_store.py -v
"""

import pytest
from datetime import datetime

from app.store.base import Increment, QuerySpec, SERVER_TIMESTAMP
from app.store.memory_store import MemoryDocumentStore


def test_add_and_get():
    store = MemoryDocumentStore()
    doc_id = store.add("posts", {"title": "Hello", "createdAt": SERVER_TIMESTAMP})

    snapshot = store.get(f"posts/{doc_id}")
    assert snapshot.exists
    assert snapshot.id == doc_id
    assert snapshot.to_dict()["title"] == "Hello"
    assert isinstance(snapshot.to_dict()["createdAt"], datetime)

    assert not store.get("posts/missing").exists


def test_update_missing_document_raises():
    store = MemoryDocumentStore()
    with pytest.raises(ValueError):
        store.update("posts/nope", {"likes": 1})


def test_increment():
    store = MemoryDocumentStore()
    store.set("posts/p1", {"likes": 0})
    store.update("posts/p1", {"likes": Increment(1)})
    store.update("posts/p1", {"likes": Increment(1)})
    store.update("posts/p1", {"likes": Increment(-1)})
    assert store.get("posts/p1").to_dict()["likes"] == 1


def test_query_filters_order_and_limit():
    store = MemoryDocumentStore()
    store.set("posts/a", {"authorId": "u1", "rank": 2})
    store.set("posts/b", {"authorId": "u2", "rank": 3})
    store.set("posts/c", {"authorId": "u1", "rank": 1})
    store.set("posts/a/likes/u9", {"userId": "u9"})  # 하위 컬렉션은 조회 대상이 아님

    result = store.query(QuerySpec("posts", filters=[("authorId", "==", "u1")], order_by="rank"))
    assert [s.id for s in result] == ["c", "a"]

    result = store.query(QuerySpec("posts", order_by="rank", descending=True, limit=2))
    assert [s.id for s in result] == ["b", "a"]

    assert store.count("posts") == 3
    assert store.count("posts/a/likes") == 1


def test_transaction_commits_all_writes():
    store = MemoryDocumentStore()
    store.set("posts/p1", {"likes": 0})

    def _like(transaction):
        assert not transaction.get("posts/p1/likes/u1").exists
        transaction.set("posts/p1/likes/u1", {"userId": "u1"})
        transaction.update("posts/p1", {"likes": Increment(1)})
        return "done"

    assert store.run_transaction(_like) == "done"
    assert store.get("posts/p1").to_dict()["likes"] == 1
    assert store.get("posts/p1/likes/u1").exists


def test_transaction_writes_nothing_on_error():
    store = MemoryDocumentStore()
    store.set("posts/p1", {"likes": 0})

    def _fail(transaction):
        transaction.set("posts/p1/likes/u1", {"userId": "u1"})
        transaction.update("posts/p1", {"likes": Increment(1)})
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        store.run_transaction(_fail)
    assert store.get("posts/p1").to_dict()["likes"] == 0
    assert not store.get("posts/p1/likes/u1").exists


def test_batch_update_is_all_or_nothing():
    store = MemoryDocumentStore()
    store.set("users/u1/notifications/n1", {"read": False})

    with pytest.raises(ValueError):
        store.batch_update([
            ("users/u1/notifications/n1", {"read": True}),
            ("users/u1/notifications/missing", {"read": True}),
        ])
    assert store.get("users/u1/notifications/n1").to_dict()["read"] is False

    store.batch_update([("users/u1/notifications/n1", {"read": True})])
    assert store.get("users/u1/notifications/n1").to_dict()["read"] is True


def test_watch_delivers_initial_and_changes():
    store = MemoryDocumentStore()
    received = []
    spec = QuerySpec("users/u1/notifications", order_by="createdAt", descending=True)

    subscription = store.watch(spec, lambda docs: received.append([d.id for d in docs]))
    assert received == [[]]

    store.set("users/u1/notifications/n1", {"createdAt": SERVER_TIMESTAMP})
    assert received[-1] == ["n1"]

    # 다른 컬렉션의 변경은 전달되지 않음
    store.set("users/u2/notifications/x", {"createdAt": SERVER_TIMESTAMP})
    assert len(received) == 2

    subscription.unsubscribe()
    store.set("users/u1/notifications/n2", {"createdAt": SERVER_TIMESTAMP})
    assert len(received) == 2


def test_invalid_document_path():
    store = MemoryDocumentStore()
    with pytest.raises(ValueError):
        store.get("posts")
