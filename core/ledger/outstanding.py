"""
미수/미지급 잔액 요약 서비스 (Outstanding Summary Service)

특정 유형(고객/공급처)의 모든 거래처에 대해 기준일 당일까지의 잔액을 계산한다.

- 거래처별 조회는 Semaphore로 동시 실행 수를 제한하고, 거래처마다 타임아웃 적용
- 거래처 하나의 실패/타임아웃은 요청 전체를 실패시키지 않음 → degraded 행으로 보고
- |잔액| < 0.01 인 정상 행은 제외, 잔액 내림차순 정렬
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.constants import Defaults, LedgerThresholds
from core.ledger.errors import InvalidAsOfDateError, InvalidPartyTypeError
from core.ledger.history import load_history
from core.ledger.normalizer import EventNormalizer
from core.ledger.reconciler import balance_as_of
from core.ledger.types import Entity, SummaryRow
from core.types import PartyType
from core.utils.timezone import DateParseFailure, parse_date

if TYPE_CHECKING:
    from adapters.interfaces import ILedgerStore

logger = logging.getLogger(__name__)


def is_outstanding(row: SummaryRow, epsilon: Decimal = LedgerThresholds.BALANCE_EPSILON) -> bool:
    """요약에 표시할 행인지 (degraded 행은 항상 표시)"""
    return row.degraded or abs(row.balance) >= epsilon


class OutstandingSummaryService:
    """미수/미지급 잔액 요약

    Args:
        store: 원장 저장소
        normalizer: 이벤트 정규화기 (None이면 기본 설정)
        concurrency: 동시에 조회할 최대 거래처 수
        entity_timeout: 거래처 하나의 조회 타임아웃 (초)

    사용 예시:
    ```python
    service = OutstandingSummaryService(store, concurrency=8)
    rows = await service.get_outstanding_summary("customer", "2024-03-31")
    for row in rows:
        print(row.display_name, row.balance, row.degraded)
    ```
    """

    def __init__(
        self,
        store: ILedgerStore,
        normalizer: EventNormalizer | None = None,
        concurrency: int = Defaults.SUMMARY_CONCURRENCY,
        entity_timeout: float = Defaults.ENTITY_TIMEOUT_SEC,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1: {concurrency}")
        self.store = store
        self.normalizer = normalizer or EventNormalizer()
        self.concurrency = concurrency
        self.entity_timeout = entity_timeout

    async def get_outstanding_summary(self, party_type: Any, as_of: Any) -> list[SummaryRow]:
        """기준일 잔액 요약

        Args:
            party_type: PartyType 또는 "customer" / "vendor"
            as_of: 기준일 (당일 포함)

        Returns:
            잔액 내림차순 SummaryRow 목록

        Raises:
            InvalidPartyTypeError: 알 수 없는 거래처 유형
            InvalidAsOfDateError: 기준일 파싱 불가
            LedgerStoreError: 거래처 목록 조회 실패
        """
        kind = self._parse_party_type(party_type)
        cutoff_day = parse_date(as_of, self.normalizer.tz)
        if isinstance(cutoff_day, DateParseFailure):
            raise InvalidAsOfDateError(as_of, cutoff_day.reason)

        entities = await self.store.fetch_entities(kind)

        sem = asyncio.Semaphore(self.concurrency)

        async def _summarize(entity: Entity) -> SummaryRow:
            async with sem:
                return await self._summarize_entity(entity, cutoff_day)

        rows = await asyncio.gather(*[_summarize(e) for e in entities])

        visible = [row for row in rows if is_outstanding(row)]
        visible.sort(key=lambda row: row.balance, reverse=True)

        degraded = sum(1 for row in visible if row.degraded)
        logger.info(
            f"잔액 요약 완료: {kind.value} {cutoff_day} "
            f"({len(visible)}/{len(entities)}건, degraded {degraded}건)",
            extra={"party_type": kind.value, "as_of": str(cutoff_day)},
        )
        return visible

    async def _summarize_entity(self, entity: Entity, cutoff_day: date) -> SummaryRow:
        """거래처 하나의 잔액 계산 (실패 시 degraded 행)"""
        try:
            history = await asyncio.wait_for(
                load_history(self.store, self.normalizer, entity),
                timeout=self.entity_timeout,
            )
            balance = balance_as_of(entity.party_type, history.events, cutoff_day)
        except asyncio.TimeoutError:
            return self._degraded(entity, f"timed out after {self.entity_timeout}s")
        except Exception as e:
            return self._degraded(entity, f"{type(e).__name__}: {e}")

        return SummaryRow(
            entity_id=entity.id,
            display_name=entity.display_name,
            party_type=entity.party_type,
            balance=balance,
            warning_count=len(history.warnings),
        )

    @staticmethod
    def _degraded(entity: Entity, error: str) -> SummaryRow:
        logger.warning(
            f"거래처 잔액 계산 실패: {entity.id} ({error})",
            extra={"entity_id": entity.id, "party_type": entity.party_type.value},
        )
        return SummaryRow(
            entity_id=entity.id,
            display_name=entity.display_name,
            party_type=entity.party_type,
            balance=Decimal("0"),
            degraded=True,
            error=error,
        )

    @staticmethod
    def _parse_party_type(value: Any) -> PartyType:
        try:
            return PartyType.parse(value)
        except ValueError:
            raise InvalidPartyTypeError(value)
