# app/models/interaction.py
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LikeState:
    """게시물 카드가 보여주는 좋아요 상태 (현재 사용자 기준)."""
    liked: bool
    likes: int

    def toggled(self) -> "LikeState":
        """낙관적 갱신 값. 카운터는 0 아래로 내려가지 않습니다."""
        likes = self.likes - 1 if self.liked else self.likes + 1
        return LikeState(liked=not self.liked, likes=max(0, likes))


@dataclass(frozen=True)
class InteractionResult:
    """
    좋아요 트랜잭션 결과.
    - committed=True  -> state는 새 상태(new_state)
    - committed=False -> state는 되돌릴 상태(rollback_state), reason에 사유
    """
    committed: bool
    state: LikeState
    reason: Optional[str] = None

    @classmethod
    def commit(cls, new_state: LikeState) -> "InteractionResult":
        return cls(committed=True, state=new_state)

    @classmethod
    def rollback(cls, reason: str, rollback_state: LikeState) -> "InteractionResult":
        return cls(committed=False, state=rollback_state, reason=reason)

    @property
    def new_state(self) -> Optional[LikeState]:
        return self.state if self.committed else None

    @property
    def rollback_state(self) -> Optional[LikeState]:
        return None if self.committed else self.state


def state_after(result: InteractionResult) -> LikeState:
    """결과만으로 결정되는 최종 로컬 상태."""
    return result.state
