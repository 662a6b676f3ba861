"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from typing import Any, Protocol, runtime_checkable

from core.ledger.types import Entity
from core.types import PartyType


@runtime_checkable
class ILedgerStore(Protocol):
    """원장 저장소 인터페이스

    거래처 및 거래처별 원본 레코드를 조회한다.
    장부 엔진은 읽기 전용이며 반환된 레코드를 변경하지 않는다.
    레코드는 문서 원본(dict) 그대로이며 "id" 키에 문서 ID가 들어 있다.
    """

    async def fetch_entities(self, party_type: PartyType) -> list[Entity]:
        """거래처 목록 조회

        Args:
            party_type: 고객 / 공급처

        Returns:
            플레이스홀더/삭제 문서를 제외한 거래처 목록
        """
        ...

    async def fetch_entity(self, entity_id: str) -> Entity | None:
        """거래처 단건 조회

        Returns:
            거래처 또는 None (없음)
        """
        ...

    async def fetch_invoices(self, entity_id: str) -> list[dict[str, Any]]:
        """거래처의 판매(인보이스) 레코드 조회"""
        ...

    async def fetch_purchases(self, entity_id: str) -> list[dict[str, Any]]:
        """거래처의 매입 레코드 조회"""
        ...

    async def fetch_transactions(self, entity_id: str) -> list[dict[str, Any]]:
        """거래처의 결제(수금/지급) 레코드 조회"""
        ...
