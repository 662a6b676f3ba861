"""
거래처 이력 로더

거래처 하나의 원본 레코드(판매/매입/결제)를 한 번에 가져와 정규화한다.
Range Query / Outstanding Summary가 같은 경로로 이력을 만든다.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from core.ledger.normalizer import EventNormalizer
from core.ledger.types import Entity, NormalizationResult

if TYPE_CHECKING:
    from adapters.interfaces import ILedgerStore


async def load_history(
    store: ILedgerStore,
    normalizer: EventNormalizer,
    entity: Entity,
) -> NormalizationResult:
    """거래처 전체 이력 조회 + 정규화

    세 컬렉션은 동시에 조회한다. 저장소 예외는 그대로 전파.

    Args:
        store: 원장 저장소
        normalizer: 이벤트 정규화기
        entity: 대상 거래처

    Returns:
        NormalizationResult (기초 잔액 이벤트 포함)
    """
    invoices, purchases, transactions = await asyncio.gather(
        store.fetch_invoices(entity.id),
        store.fetch_purchases(entity.id),
        store.fetch_transactions(entity.id),
    )

    return normalizer.normalize(
        entity.party_type,
        entity.opening_balance,
        invoices,
        purchases,
        transactions,
        entity_id=entity.id,
    )
