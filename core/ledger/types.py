"""
장부 타입 정의

거래처 원장(Party Ledger)에서 사용하는 Enum 및 데이터 구조.
LedgerEvent / LedgerRow는 조회 시마다 새로 생성되며 저장되지 않는다.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from core.types import PartyType


class EventKind(str, Enum):
    """원장 이벤트 종류

    str을 상속하여 JSON 직렬화 가능.
    """

    OPENING = "opening"  # 기초 잔액
    INVOICE = "invoice"  # 판매 (고객)
    PURCHASE = "purchase"  # 매입 (공급처)
    RECEIVED = "received"  # 수금
    PAID = "paid"  # 지급


# 같은 날짜 내 정렬 우선순위 (작을수록 먼저)
KIND_PRIORITY: dict[EventKind, int] = {
    EventKind.OPENING: 0,
    EventKind.INVOICE: 1,
    EventKind.PURCHASE: 1,
    EventKind.RECEIVED: 1,
    EventKind.PAID: 1,
}


class RecordSource(str, Enum):
    """원본 레코드 출처 (문서 컬렉션 종류)"""

    INVOICE = "invoice"
    PURCHASE = "purchase"
    TRANSACTION = "transaction"


@dataclass(frozen=True)
class Entity:
    """거래처 (고객 또는 공급처)"""

    id: str
    display_name: str
    party_type: PartyType
    opening_balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class LedgerEvent:
    """정규화된 원장 이벤트

    amount는 항상 0 이상의 크기(magnitude).
    부호는 Reconciler의 부호 규칙표에서만 적용된다.
    단, 기초 잔액(OPENING)은 sign 필드로 부호를 전달한다.
    """

    entity_id: str
    date: date
    kind: EventKind
    amount: Decimal
    sign: int = 1

    # 추적 정보 (잔액 계산에는 사용하지 않음)
    source_id: str | None = None
    reference: str | None = None

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"LedgerEvent amount must be non-negative: {self.amount}")
        if self.sign not in (1, -1):
            raise ValueError(f"LedgerEvent sign must be +1 or -1: {self.sign}")

    @property
    def signed_opening(self) -> Decimal:
        """기초 잔액 (부호 포함)"""
        return self.amount * self.sign


@dataclass(frozen=True)
class LedgerRow:
    """원장 행 = 이벤트 + 적용 직후 누적 잔액"""

    event: LedgerEvent
    running_balance: Decimal

    @property
    def date(self) -> date:
        return self.event.date

    @property
    def kind(self) -> EventKind:
        return self.event.kind

    @property
    def amount(self) -> Decimal:
        return self.event.amount


@dataclass(frozen=True)
class NormalizationWarning:
    """정규화 경고

    날짜/금액 파싱 불가 등으로 제외된 레코드. 조용히 버리지 않고 호출자에게 보고.
    """

    source: RecordSource
    record_id: str | None
    reason: str
    raw_value: Any = None


@dataclass
class NormalizationResult:
    """Normalizer 결과"""

    events: list[LedgerEvent] = field(default_factory=list)
    warnings: list[NormalizationWarning] = field(default_factory=list)


@dataclass(frozen=True)
class RangeResult:
    """기간 원장 조회 결과

    opening_carry: 기간 시작 직전까지의 누적 잔액 (기초 잔액 포함)
    closing_balance: 기간 마지막 행의 잔액 (행이 없으면 opening_carry)
    """

    entity: Entity
    from_date: date
    to_date: date
    rows: list[LedgerRow]
    opening_carry: Decimal
    closing_balance: Decimal
    total_debit: Decimal = Decimal("0")
    total_credit: Decimal = Decimal("0")
    warnings: list[NormalizationWarning] = field(default_factory=list)


@dataclass(frozen=True)
class SummaryRow:
    """Outstanding Summary 행

    degraded=True: 해당 거래처 조회 실패 (balance는 0으로 표시)
    """

    entity_id: str
    display_name: str
    party_type: PartyType
    balance: Decimal
    degraded: bool = False
    error: str | None = None
    warning_count: int = 0
