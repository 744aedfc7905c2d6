# app/store/firestore_store.py
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from app.store.base import (
    DocumentSnapshot, DocumentStore, Increment, QuerySpec,
    SERVER_TIMESTAMP, Subscription, Transaction,
)
from app.utils.datetime_utils import DateTimeUtils

# Firestore 배치 쓰기 한도
_BATCH_LIMIT = 500


def _to_firestore(data: Dict[str, Any]) -> Dict[str, Any]:
    """센티널 값을 Firestore 고유 값으로 변환합니다."""
    converted = {}
    for key, value in data.items():
        if value is SERVER_TIMESTAMP:
            converted[key] = firestore.SERVER_TIMESTAMP
        elif isinstance(value, Increment):
            converted[key] = firestore.Increment(value.amount)
        else:
            converted[key] = DateTimeUtils.for_firestore(value)
    return converted


def _snapshot(doc) -> DocumentSnapshot:
    data = DateTimeUtils.from_firestore(doc.to_dict()) if doc.exists else None
    return DocumentSnapshot(id=doc.id, path=doc.reference.path, data=data)


class _FirestoreSubscription(Subscription):
    def __init__(self, watch):
        self._watch = watch

    def unsubscribe(self) -> None:
        self._watch.unsubscribe()


class _FirestoreTransaction(Transaction):
    def __init__(self, db, transaction):
        self._db = db
        self._transaction = transaction

    def get(self, path: str) -> DocumentSnapshot:
        return _snapshot(self._db.document(path).get(transaction=self._transaction))

    def set(self, path: str, data: Dict[str, Any]) -> None:
        self._transaction.set(self._db.document(path), _to_firestore(data))

    def update(self, path: str, data: Dict[str, Any]) -> None:
        self._transaction.update(self._db.document(path), _to_firestore(data))

    def delete(self, path: str) -> None:
        self._transaction.delete(self._db.document(path))


class FirestoreDocumentStore(DocumentStore):
    """
    firebase_admin Firestore 클라이언트를 감싸는 저장소 구현.
    firebase_admin.initialize_app()이 먼저 호출되어 있어야 합니다.
    """

    def __init__(self, db=None):
        self.db = db or firestore.client()

    def _build_query(self, spec: QuerySpec):
        query = self.db.collection(spec.collection_path)
        for field, op, value in spec.filters:
            query = query.where(filter=FieldFilter(field, op, value))
        if spec.order_by:
            direction = firestore.Query.DESCENDING if spec.descending else firestore.Query.ASCENDING
            query = query.order_by(spec.order_by, direction=direction)
        if spec.limit is not None:
            query = query.limit(spec.limit)
        return query

    def get(self, path: str) -> DocumentSnapshot:
        return _snapshot(self.db.document(path).get())

    def query(self, spec: QuerySpec) -> List[DocumentSnapshot]:
        return [_snapshot(doc) for doc in self._build_query(spec).stream()]

    def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        _, doc_ref = self.db.collection(collection_path).add(_to_firestore(data))
        return doc_ref.id

    def set(self, path: str, data: Dict[str, Any]) -> None:
        self.db.document(path).set(_to_firestore(data))

    def update(self, path: str, data: Dict[str, Any]) -> None:
        self.db.document(path).update(_to_firestore(data))

    def delete(self, path: str) -> None:
        self.db.document(path).delete()

    def run_transaction(self, fn: Callable[[Transaction], Any]) -> Any:
        transaction = self.db.transaction()

        @firestore.transactional
        def _run_in_transaction(transaction):
            return fn(_FirestoreTransaction(self.db, transaction))

        return _run_in_transaction(transaction)

    def batch_update(self, updates: List[Tuple[str, Dict[str, Any]]]) -> None:
        for i in range(0, len(updates), _BATCH_LIMIT):
            batch = self.db.batch()
            for path, data in updates[i:i + _BATCH_LIMIT]:
                batch.update(self.db.document(path), _to_firestore(data))
            batch.commit()

    def watch(self, spec: QuerySpec, callback: Callable[[List[DocumentSnapshot]], None]) -> Subscription:
        def _on_snapshot(col_snapshot, changes, read_time):
            try:
                callback([_snapshot(doc) for doc in col_snapshot])
            except Exception as e:
                logging.error(f"Firestore 실시간 구독 콜백 처리 실패 ({spec.collection_path}): {e}", exc_info=True)

        watch = self._build_query(spec).on_snapshot(_on_snapshot)
        return _FirestoreSubscription(watch)
