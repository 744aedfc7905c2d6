# app/store/memory_store.py
"""
프로세스 내부 메모리 문서 저장소.

TestingConfig(FANHUB_STORE='memory')와 테스트에서 Firestore 대신 사용합니다.
트랜잭션은 전역 락을 잡은 상태로 실행되므로 직렬화 가능(serializable)합니다.
"""
import copy
import logging
import threading
import uuid
from typing import Any, Callable, Dict, List, Tuple

from app.store.base import (
    DocumentSnapshot, DocumentStore, Increment, QuerySpec,
    SERVER_TIMESTAMP, Subscription, Transaction,
)
from app.utils.datetime_utils import DateTimeUtils

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    '==': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
    '<': lambda a, b: a is not None and a < b,
    '<=': lambda a, b: a is not None and a <= b,
    '>': lambda a, b: a is not None and a > b,
    '>=': lambda a, b: a is not None and a >= b,
    'in': lambda a, b: a in b,
}


def _parent_collection(path: str) -> str:
    return path.rsplit('/', 1)[0]


def _check_document_path(path: str) -> None:
    segments = path.strip('/').split('/')
    if len(segments) % 2 != 0 or not all(segments):
        raise ValueError(f"Invalid document path: {path}")


class _MemorySubscription(Subscription):
    def __init__(self, store: "MemoryDocumentStore", token: str):
        self._store = store
        self._token = token

    def unsubscribe(self) -> None:
        self._store._remove_watcher(self._token)


class _MemoryTransaction(Transaction):
    def __init__(self, store: "MemoryDocumentStore"):
        self._store = store
        self.writes: List[Tuple[str, str, Any]] = []

    def get(self, path: str) -> DocumentSnapshot:
        return self._store._snapshot(path)

    def set(self, path: str, data: Dict[str, Any]) -> None:
        _check_document_path(path)
        self.writes.append(('set', path, copy.deepcopy(data)))

    def update(self, path: str, data: Dict[str, Any]) -> None:
        self.writes.append(('update', path, copy.deepcopy(data)))

    def delete(self, path: str) -> None:
        self.writes.append(('delete', path, None))


class MemoryDocumentStore(DocumentStore):
    """dict 기반 문서 저장소. 문서 경로 -> 필드 dict."""

    def __init__(self):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._watchers: Dict[str, Tuple[QuerySpec, Callable]] = {}

    # --- 내부 헬퍼 ---
    def _snapshot(self, path: str) -> DocumentSnapshot:
        _check_document_path(path)
        with self._lock:
            data = self._docs.get(path)
            return DocumentSnapshot(
                id=path.rsplit('/', 1)[-1],
                path=path,
                data=copy.deepcopy(data) if data is not None else None,
            )

    def _resolve(self, data: Dict[str, Any], existing: Dict[str, Any]) -> Dict[str, Any]:
        resolved = {}
        for key, value in data.items():
            if value is SERVER_TIMESTAMP:
                resolved[key] = DateTimeUtils.now()
            elif isinstance(value, Increment):
                resolved[key] = (existing.get(key) or 0) + value.amount
            else:
                resolved[key] = copy.deepcopy(value)
        return resolved

    def _apply(self, op: str, path: str, data: Any) -> None:
        if op == 'set':
            self._docs[path] = self._resolve(data, {})
        elif op == 'update':
            existing = self._docs.get(path)
            if existing is None:
                raise ValueError(f"No document to update: {path}")
            existing.update(self._resolve(data, existing))
        elif op == 'delete':
            self._docs.pop(path, None)

    def _matches(self, path: str, data: Dict[str, Any], spec: QuerySpec) -> bool:
        if _parent_collection(path) != spec.collection_path.strip('/'):
            return False
        return all(_OPERATORS[op](data.get(field), value) for field, op, value in spec.filters)

    def _notify(self, changed_paths: List[str]) -> None:
        collections = {_parent_collection(p) for p in changed_paths}
        with self._lock:
            watchers = [w for w in self._watchers.values() if w[0].collection_path.strip('/') in collections]
        for spec, callback in watchers:
            try:
                callback(self.query(spec))
            except Exception as e:
                logging.error(f"Memory store watcher callback failed ({spec.collection_path}): {e}", exc_info=True)

    def _remove_watcher(self, token: str) -> None:
        with self._lock:
            self._watchers.pop(token, None)

    # --- DocumentStore 구현 ---
    def get(self, path: str) -> DocumentSnapshot:
        return self._snapshot(path)

    def query(self, spec: QuerySpec) -> List[DocumentSnapshot]:
        with self._lock:
            matched = [
                DocumentSnapshot(id=path.rsplit('/', 1)[-1], path=path, data=copy.deepcopy(data))
                for path, data in self._docs.items()
                if self._matches(path, data, spec)
            ]
        if spec.order_by:
            field = spec.order_by
            # None 값은 오름차순 기준 맨 앞에 둡니다. 동일 값은 삽입 순서를 유지합니다.
            matched.sort(key=lambda s: (s.data.get(field) is not None, s.data.get(field)), reverse=spec.descending)
        if spec.limit is not None:
            matched = matched[:spec.limit]
        return matched

    def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self.set(f"{collection_path.strip('/')}/{doc_id}", data)
        return doc_id

    def set(self, path: str, data: Dict[str, Any]) -> None:
        _check_document_path(path)
        with self._lock:
            self._apply('set', path, data)
        self._notify([path])

    def update(self, path: str, data: Dict[str, Any]) -> None:
        _check_document_path(path)
        with self._lock:
            self._apply('update', path, data)
        self._notify([path])

    def delete(self, path: str) -> None:
        _check_document_path(path)
        with self._lock:
            self._apply('delete', path, None)
        self._notify([path])

    def run_transaction(self, fn: Callable[[Transaction], Any]) -> Any:
        with self._lock:
            transaction = _MemoryTransaction(self)
            result = fn(transaction)
            for op, path, _ in transaction.writes:
                if op == 'update' and path not in self._docs:
                    raise ValueError(f"No document to update: {path}")
            for op, path, data in transaction.writes:
                self._apply(op, path, data)
        if transaction.writes:
            self._notify([path for _, path, _ in transaction.writes])
        return result

    def batch_update(self, updates: List[Tuple[str, Dict[str, Any]]]) -> None:
        with self._lock:
            for path, _ in updates:
                _check_document_path(path)
                if path not in self._docs:
                    raise ValueError(f"No document to update: {path}")
            for path, data in updates:
                self._apply('update', path, data)
        if updates:
            self._notify([path for path, _ in updates])

    def watch(self, spec: QuerySpec, callback: Callable[[List[DocumentSnapshot]], None]) -> Subscription:
        token = uuid.uuid4().hex
        with self._lock:
            self._watchers[token] = (spec, callback)
        # Firestore on_snapshot과 동일하게 최초 스냅샷을 즉시 전달
        callback(self.query(spec))
        return _MemorySubscription(self, token)

    # --- 테스트 보조 ---
    def count(self, collection_path: str) -> int:
        """컬렉션의 문서 수 (하위 컬렉션 제외)."""
        return len(self.query(QuerySpec(collection_path=collection_path)))
