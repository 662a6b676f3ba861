"""
Mock 원장 저장소

테스트용 메모리 내 ILedgerStore 구현.
거래처별 조회 실패/지연을 주입하여 Outstanding Summary의
부분 실패 및 동시성 제한 시나리오를 재현한다.
"""

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Any, Mapping

from adapters.models import (
    INVOICE_PARTY_FIELD,
    PURCHASE_PARTY_FIELD,
    TRANSACTION_PARTY_FIELD,
    entity_from_document,
    with_id,
)
from core.ledger.errors import LedgerStoreError
from core.ledger.types import Entity
from core.types import PartyType


@dataclass
class MockLedgerState:
    """Mock 상태 (메모리 내 저장)"""

    # 컬렉션별 문서 (doc_id -> data)
    entities: dict[str, dict[str, Any]] = field(default_factory=dict)
    invoices: dict[str, dict[str, Any]] = field(default_factory=dict)
    purchases: dict[str, dict[str, Any]] = field(default_factory=dict)
    transactions: dict[str, dict[str, Any]] = field(default_factory=dict)

    # 시뮬레이션 옵션: (메서드 이름, entity_id) -> 예외
    failures: dict[tuple[str, str], Exception] = field(default_factory=dict)
    # entity_id -> 조회 지연 (초)
    delays: dict[str, float] = field(default_factory=dict)
    fail_entity_listing: bool = False

    # 호출 통계
    call_counts: dict[str, int] = field(default_factory=dict)
    in_flight: int = 0
    max_in_flight: int = 0


class MockLedgerStore:
    """Mock 원장 저장소

    ILedgerStore Protocol 구현.

    사용 예시:
    ```python
    store = MockLedgerStore()
    store.add_entity("c1", {"opticalName": "Vision Care", "openingBalance": 1000})
    store.add_invoice("s1", {"customerId": "c1", "invoiceDate": "2024-01-01", "totalAmount": 500})

    # 특정 거래처 결제 조회 실패
    store.fail_on("fetch_transactions", "c1")
    ```
    """

    def __init__(self, state: MockLedgerState | None = None):
        self.state = state or MockLedgerState()
        self._counter = 0

    # -------------------------------------------------------------------------
    # 데이터 설정
    # -------------------------------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}_{self._counter:05d}"

    def add_entity(self, doc_id: str, data: Mapping[str, Any]) -> None:
        self.state.entities[doc_id] = dict(data)

    def add_invoice(self, doc_id: str | None, data: Mapping[str, Any]) -> str:
        doc_id = doc_id or self._next_id("sale")
        self.state.invoices[doc_id] = dict(data)
        return doc_id

    def add_purchase(self, doc_id: str | None, data: Mapping[str, Any]) -> str:
        doc_id = doc_id or self._next_id("purchase")
        self.state.purchases[doc_id] = dict(data)
        return doc_id

    def add_transaction(self, doc_id: str | None, data: Mapping[str, Any]) -> str:
        doc_id = doc_id or self._next_id("txn")
        self.state.transactions[doc_id] = dict(data)
        return doc_id

    def fail_on(
        self,
        method: str,
        entity_id: str,
        error: Exception | None = None,
    ) -> None:
        """특정 거래처의 조회 실패 설정"""
        self.state.failures[(method, entity_id)] = error or LedgerStoreError(
            f"Mock {method} failure: {entity_id}"
        )

    def delay_on(self, entity_id: str, seconds: float) -> None:
        """특정 거래처의 조회 지연 설정"""
        self.state.delays[entity_id] = seconds

    # -------------------------------------------------------------------------
    # ILedgerStore
    # -------------------------------------------------------------------------

    async def fetch_entities(self, party_type: PartyType) -> list[Entity]:
        self._count("fetch_entities")
        if self.state.fail_entity_listing:
            raise LedgerStoreError("Mock fetch_entities failure")

        entities = [
            entity
            for doc_id, data in self.state.entities.items()
            if (entity := entity_from_document(doc_id, data)) is not None
            and entity.party_type == party_type
        ]
        entities.sort(key=lambda e: e.display_name.lower())
        return entities

    async def fetch_entity(self, entity_id: str) -> Entity | None:
        self._count("fetch_entity")
        data = self.state.entities.get(entity_id)
        if data is None:
            return None
        return entity_from_document(entity_id, data)

    async def fetch_invoices(self, entity_id: str) -> list[dict[str, Any]]:
        return await self._fetch(
            "fetch_invoices", self.state.invoices, INVOICE_PARTY_FIELD, entity_id
        )

    async def fetch_purchases(self, entity_id: str) -> list[dict[str, Any]]:
        return await self._fetch(
            "fetch_purchases", self.state.purchases, PURCHASE_PARTY_FIELD, entity_id
        )

    async def fetch_transactions(self, entity_id: str) -> list[dict[str, Any]]:
        return await self._fetch(
            "fetch_transactions", self.state.transactions, TRANSACTION_PARTY_FIELD, entity_id
        )

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    def _count(self, method: str) -> None:
        self.state.call_counts[method] = self.state.call_counts.get(method, 0) + 1

    async def _fetch(
        self,
        method: str,
        documents: dict[str, dict[str, Any]],
        party_field: str,
        entity_id: str,
    ) -> list[dict[str, Any]]:
        self._count(method)
        self.state.in_flight += 1
        self.state.max_in_flight = max(self.state.max_in_flight, self.state.in_flight)
        try:
            delay = self.state.delays.get(entity_id, 0)
            # 실제 I/O처럼 이벤트 루프에 제어권 양보
            await asyncio.sleep(delay)

            error = self.state.failures.get((method, entity_id))
            if error is not None:
                raise error

            # 호출자가 변경해도 저장된 원본이 바뀌지 않도록 깊은 복사
            return [
                with_id(doc_id, copy.deepcopy(data))
                for doc_id, data in documents.items()
                if data.get(party_field) == entity_id
            ]
        finally:
            self.state.in_flight -= 1
