"""
거래처 원장 (Party Ledger) 엔진

고객/공급처별 판매, 매입, 결제 레코드를 하나의 시간순 원장으로 정산한다.
잔액은 저장하지 않고 조회 시마다 원본 레코드에서 다시 계산한다.

사용 예시:
```python
from core.ledger import OutstandingSummaryService, RangeQueryService

# 기간 원장 (명세서)
range_service = RangeQueryService(store)
result = await range_service.get_range_ledger("c1", "2024-01-01", "2024-01-31")

# 기준일 잔액 요약
summary_service = OutstandingSummaryService(store, concurrency=8)
rows = await summary_service.get_outstanding_summary("customer", "2024-01-31")
```
"""

from core.ledger.errors import (
    EntityNotFoundError,
    InvalidAsOfDateError,
    InvalidPartyTypeError,
    InvalidRangeError,
    LedgerError,
    LedgerStoreError,
    LedgerValidationError,
    NotFoundError,
    UnsupportedEventError,
)
from core.ledger.normalizer import EventNormalizer, normalize
from core.ledger.outstanding import OutstandingSummaryService
from core.ledger.range_query import RangeQueryService
from core.ledger.reconciler import SIGN_CONVENTIONS, BalanceEffect, reconcile
from core.ledger.types import (
    Entity,
    EventKind,
    LedgerEvent,
    LedgerRow,
    NormalizationResult,
    NormalizationWarning,
    RangeResult,
    SummaryRow,
)

__all__ = [
    # 서비스
    "RangeQueryService",
    "OutstandingSummaryService",
    "EventNormalizer",
    "normalize",
    "reconcile",
    # 데이터 구조
    "Entity",
    "EventKind",
    "LedgerEvent",
    "LedgerRow",
    "NormalizationResult",
    "NormalizationWarning",
    "RangeResult",
    "SummaryRow",
    # 부호 규칙
    "BalanceEffect",
    "SIGN_CONVENTIONS",
    # 예외
    "LedgerError",
    "NotFoundError",
    "EntityNotFoundError",
    "LedgerValidationError",
    "InvalidRangeError",
    "InvalidAsOfDateError",
    "InvalidPartyTypeError",
    "UnsupportedEventError",
    "LedgerStoreError",
]
