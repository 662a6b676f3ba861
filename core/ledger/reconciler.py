"""
잔액 정산기 (Balance Reconciler)

정규화된 LedgerEvent를 시간순으로 정렬하고 거래처 유형별 부호 규칙에 따라
누적 잔액을 계산한다.

SIGN_CONVENTIONS는 부호 규칙의 유일한 정의다. 화면/리포트/내보내기 등
잔액 방향이 필요한 곳은 모두 이 모듈의 함수를 통해 계산해야 한다.

순수 함수: 같은 입력이면 항상 같은 출력 (숨은 상태 없음).
"""

from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from core.ledger.errors import UnsupportedEventError
from core.ledger.types import KIND_PRIORITY, EventKind, LedgerEvent, LedgerRow
from core.types import PartyType


class BalanceEffect(str, Enum):
    """이벤트가 잔액에 미치는 영향"""

    SET = "set"  # balance = 부호 포함 금액 (기초 잔액)
    INCREASE = "increase"  # balance += amount
    DECREASE = "decrease"  # balance -= amount


# (거래처 유형, 이벤트 종류) → 잔액 영향
# 고객: 양수 = 고객이 우리에게 갚을 금액
# 공급처: 양수 = 우리가 공급처에 갚을 금액
SIGN_CONVENTIONS: dict[tuple[PartyType, EventKind], BalanceEffect] = {
    (PartyType.CUSTOMER, EventKind.OPENING): BalanceEffect.SET,
    (PartyType.CUSTOMER, EventKind.INVOICE): BalanceEffect.INCREASE,
    (PartyType.CUSTOMER, EventKind.PURCHASE): BalanceEffect.INCREASE,
    (PartyType.CUSTOMER, EventKind.RECEIVED): BalanceEffect.DECREASE,
    (PartyType.CUSTOMER, EventKind.PAID): BalanceEffect.INCREASE,
    (PartyType.VENDOR, EventKind.OPENING): BalanceEffect.SET,
    (PartyType.VENDOR, EventKind.PURCHASE): BalanceEffect.INCREASE,
    (PartyType.VENDOR, EventKind.PAID): BalanceEffect.DECREASE,
    (PartyType.VENDOR, EventKind.RECEIVED): BalanceEffect.INCREASE,
}


def is_supported(party_type: PartyType, kind: EventKind) -> bool:
    """부호 규칙이 정의된 조합인지 확인"""
    return (party_type, kind) in SIGN_CONVENTIONS


def effect_of(party_type: PartyType, event: LedgerEvent) -> BalanceEffect:
    """이벤트의 잔액 영향 조회

    Raises:
        UnsupportedEventError: 규칙표에 없는 조합
    """
    effect = SIGN_CONVENTIONS.get((party_type, event.kind))
    if effect is None:
        raise UnsupportedEventError(party_type.value, event.kind.value, event.date)
    return effect


def signed_effect(party_type: PartyType, event: LedgerEvent) -> Decimal:
    """0 기준 부호 포함 기여분

    SET(기초 잔액)은 sign을 적용한 금액을 그대로 기여분으로 본다.
    """
    effect = effect_of(party_type, event)
    if effect is BalanceEffect.SET:
        return event.signed_opening
    if effect is BalanceEffect.INCREASE:
        return event.amount
    return -event.amount


def apply_event(party_type: PartyType, balance: Decimal, event: LedgerEvent) -> Decimal:
    """이벤트 하나를 잔액에 적용"""
    effect = effect_of(party_type, event)
    if effect is BalanceEffect.SET:
        return event.signed_opening
    if effect is BalanceEffect.INCREASE:
        return balance + event.amount
    return balance - event.amount


def is_debit(party_type: PartyType, event: LedgerEvent) -> bool:
    """잔액을 증가시키는 이벤트인지 (명세서 Debit 열)"""
    return signed_effect(party_type, event) >= 0


def order_events(events: Iterable[LedgerEvent]) -> list[LedgerEvent]:
    """(날짜, 종류 우선순위, 입력 순서)로 정렬

    sorted()는 안정 정렬이므로 동일 키는 입력 순서를 유지한다.
    """
    return sorted(events, key=lambda e: (e.date, KIND_PRIORITY[e.kind]))


def reconcile(party_type: PartyType, events: Sequence[LedgerEvent]) -> list[LedgerRow]:
    """이벤트를 정렬하고 누적 잔액 계산

    Args:
        party_type: 거래처 유형
        events: 정규화된 이벤트 (순서 무관)

    Returns:
        정렬된 LedgerRow 목록 (각 행은 해당 이벤트 적용 직후 잔액)

    Raises:
        UnsupportedEventError: 규칙표에 없는 조합 포함 시
    """
    balance = Decimal("0")
    rows: list[LedgerRow] = []

    for event in order_events(events):
        balance = apply_event(party_type, balance, event)
        rows.append(LedgerRow(event=event, running_balance=balance))

    return rows


def final_balance(party_type: PartyType, events: Sequence[LedgerEvent]) -> Decimal:
    """모든 이벤트 적용 후 잔액 (이벤트 없으면 0)"""
    rows = reconcile(party_type, events)
    if not rows:
        return Decimal("0")
    return rows[-1].running_balance


def balance_before(rows: Sequence[LedgerRow], from_date: date) -> Decimal:
    """기간 시작 직전 잔액 (이월 잔액)

    정렬된 행에서 기초 잔액 행 또는 from_date 이전 행으로 이루어진
    앞부분의 마지막 잔액. 해당 행이 없으면 0.
    """
    carry = Decimal("0")
    for row in rows:
        if row.kind is not EventKind.OPENING and row.date >= from_date:
            break
        carry = row.running_balance
    return carry


def balance_as_of(
    party_type: PartyType,
    events: Sequence[LedgerEvent],
    as_of: date,
) -> Decimal:
    """기준일 당일까지의 잔액

    cutoff = 기준일 다음날. cutoff 이전(미만) 이벤트와 기초 잔액만 포함.
    """
    if as_of == date.max:
        return final_balance(party_type, events)

    cutoff = as_of + timedelta(days=1)
    included = [e for e in events if e.kind is EventKind.OPENING or e.date < cutoff]
    return final_balance(party_type, included)
