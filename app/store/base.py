# app/store/base.py
"""
문서 저장소(Document Store) 추상화.

서비스 계층은 Firestore 클라이언트를 직접 만들지 않고 이 인터페이스를 주입받습니다.
- 운영: FirestoreDocumentStore (firebase_admin)
- 테스트/로컬: MemoryDocumentStore

경로는 Firestore와 동일한 슬래시 경로를 사용합니다.
(예: 'posts/{post_id}/likes/{user_id}')
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple


class _ServerTimestamp:
    """쓰기 시점에 저장소가 채워 넣는 서버 시간 센티널."""

    def __repr__(self):
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class Increment:
    """숫자 필드를 원자적으로 증감시키는 센티널."""
    amount: int


@dataclass
class DocumentSnapshot:
    """저장소 종류와 무관한 문서 스냅샷."""
    id: str
    path: str
    data: Optional[Dict[str, Any]] = None

    @property
    def exists(self) -> bool:
        return self.data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return dict(self.data) if self.data is not None else None


# (field, op, value)
Filter = Tuple[str, str, Any]


@dataclass
class QuerySpec:
    """컬렉션 조회 조건. Firestore 쿼리의 부분집합만 지원합니다."""
    collection_path: str
    filters: List[Filter] = field(default_factory=list)
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None


class Subscription(ABC):
    """실시간 구독 핸들."""

    @abstractmethod
    def unsubscribe(self) -> None:
        ...


class Transaction(ABC):
    """트랜잭션 내부에서 사용하는 읽기/쓰기 핸들. 모든 읽기는 쓰기보다 먼저 수행해야 합니다."""

    @abstractmethod
    def get(self, path: str) -> DocumentSnapshot:
        ...

    @abstractmethod
    def set(self, path: str, data: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def update(self, path: str, data: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def delete(self, path: str) -> None:
        ...


class DocumentStore(ABC):
    """호스팅 문서 데이터베이스에 대한 최소 인터페이스."""

    @abstractmethod
    def get(self, path: str) -> DocumentSnapshot:
        """문서 하나를 ID(경로)로 조회합니다. 없으면 exists=False 스냅샷."""

    @abstractmethod
    def query(self, spec: QuerySpec) -> List[DocumentSnapshot]:
        """필터/정렬/개수 제한이 적용된 문서 목록을 반환합니다."""

    @abstractmethod
    def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        """저장소가 ID를 부여하는 새 문서를 추가하고 그 ID를 반환합니다."""

    @abstractmethod
    def set(self, path: str, data: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def update(self, path: str, data: Dict[str, Any]) -> None:
        """존재하는 문서의 일부 필드를 갱신합니다. 문서가 없으면 ValueError."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """문서 하나만 삭제합니다. 하위 컬렉션은 삭제하지 않습니다."""

    @abstractmethod
    def run_transaction(self, fn: Callable[[Transaction], Any]) -> Any:
        """fn을 원자적으로 실행하고 반환값을 돌려줍니다. fn이 예외를 던지면 아무것도 쓰지 않습니다."""

    @abstractmethod
    def batch_update(self, updates: List[Tuple[str, Dict[str, Any]]]) -> None:
        """여러 문서의 갱신을 하나의 원자적 배치로 커밋합니다."""

    @abstractmethod
    def watch(self, spec: QuerySpec, callback: Callable[[List[DocumentSnapshot]], None]) -> Subscription:
        """쿼리 결과가 바뀔 때마다 callback(전체 결과)을 호출하는 실시간 구독을 시작합니다."""
