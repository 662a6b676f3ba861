"""
잔액 정산기 테스트

부호 규칙표, 정렬 규칙, 누적 잔액 계산 검증
"""

from datetime import date
from decimal import Decimal

import pytest

from core.ledger.errors import UnsupportedEventError
from core.ledger.reconciler import (
    SIGN_CONVENTIONS,
    BalanceEffect,
    balance_as_of,
    balance_before,
    final_balance,
    is_debit,
    is_supported,
    order_events,
    reconcile,
    signed_effect,
)
from core.ledger.types import EventKind, LedgerEvent
from core.types import PartyType


def make_event(
    day: int,
    kind: EventKind,
    amount: str,
    sign: int = 1,
    month: int = 1,
    source_id: str | None = None,
) -> LedgerEvent:
    return LedgerEvent(
        entity_id="e1",
        date=date(2024, month, day),
        kind=kind,
        amount=Decimal(amount),
        sign=sign,
        source_id=source_id,
    )


class TestSignConventions:
    """부호 규칙표"""

    @pytest.mark.parametrize(
        "party_type, kind, expected",
        [
            (PartyType.CUSTOMER, EventKind.INVOICE, Decimal("100")),
            (PartyType.CUSTOMER, EventKind.PURCHASE, Decimal("100")),
            (PartyType.CUSTOMER, EventKind.RECEIVED, Decimal("-100")),
            (PartyType.CUSTOMER, EventKind.PAID, Decimal("100")),
            (PartyType.VENDOR, EventKind.PURCHASE, Decimal("100")),
            (PartyType.VENDOR, EventKind.PAID, Decimal("-100")),
            (PartyType.VENDOR, EventKind.RECEIVED, Decimal("100")),
        ],
    )
    def test_signed_effect(self, party_type: PartyType, kind: EventKind, expected: Decimal) -> None:
        event = make_event(1, kind, "100")

        assert signed_effect(party_type, event) == expected

    def test_opening_sets_balance_for_both_parties(self) -> None:
        assert SIGN_CONVENTIONS[(PartyType.CUSTOMER, EventKind.OPENING)] is BalanceEffect.SET
        assert SIGN_CONVENTIONS[(PartyType.VENDOR, EventKind.OPENING)] is BalanceEffect.SET

    def test_vendor_invoice_is_unsupported(self) -> None:
        assert not is_supported(PartyType.VENDOR, EventKind.INVOICE)

        with pytest.raises(UnsupportedEventError) as exc_info:
            reconcile(PartyType.VENDOR, [make_event(1, EventKind.INVOICE, "10")])

        assert exc_info.value.party_type == "vendor"
        assert exc_info.value.kind == "invoice"

    def test_is_debit(self) -> None:
        assert is_debit(PartyType.CUSTOMER, make_event(1, EventKind.INVOICE, "5"))
        assert not is_debit(PartyType.CUSTOMER, make_event(1, EventKind.RECEIVED, "5"))
        assert not is_debit(PartyType.VENDOR, make_event(1, EventKind.PAID, "5"))


class TestOrdering:
    """정렬 규칙"""

    def test_sorted_by_date(self) -> None:
        events = [
            make_event(3, EventKind.INVOICE, "1", source_id="late"),
            make_event(1, EventKind.INVOICE, "1", source_id="early"),
        ]

        ordered = order_events(events)

        assert [e.source_id for e in ordered] == ["early", "late"]

    def test_opening_first_on_same_day(self) -> None:
        events = [
            make_event(1, EventKind.INVOICE, "500", source_id="inv"),
            make_event(1, EventKind.OPENING, "1000", source_id="open"),
        ]

        ordered = order_events(events)

        assert ordered[0].kind is EventKind.OPENING

    def test_same_day_keeps_input_order(self) -> None:
        """같은 날짜/우선순위는 입력 순서 유지 (안정 정렬)"""
        events = [
            make_event(2, EventKind.RECEIVED, "1", source_id="a"),
            make_event(2, EventKind.INVOICE, "1", source_id="b"),
            make_event(2, EventKind.RECEIVED, "1", source_id="c"),
        ]

        ordered = order_events(events)

        assert [e.source_id for e in ordered] == ["a", "b", "c"]


class TestReconcile:
    """누적 잔액 계산"""

    def test_empty_history_is_zero(self) -> None:
        assert reconcile(PartyType.CUSTOMER, []) == []
        assert final_balance(PartyType.CUSTOMER, []) == Decimal("0")

    def test_customer_worked_example(self) -> None:
        """기초 1000, 1/1 판매 500 → 1500, 1/2 수금 300 → 1200"""
        events = [
            make_event(2, EventKind.RECEIVED, "300"),
            make_event(1, EventKind.INVOICE, "500"),
            make_event(1, EventKind.OPENING, "1000"),
        ]

        rows = reconcile(PartyType.CUSTOMER, events)

        assert [row.kind for row in rows] == [EventKind.OPENING, EventKind.INVOICE, EventKind.RECEIVED]
        assert [row.running_balance for row in rows] == [
            Decimal("1000"),
            Decimal("1500"),
            Decimal("1200"),
        ]

    def test_vendor_worked_example(self) -> None:
        """매입 2000, 지급 2000 → 0"""
        events = [
            make_event(1, EventKind.PURCHASE, "2000", month=2),
            make_event(3, EventKind.PAID, "2000", month=2),
        ]

        rows = reconcile(PartyType.VENDOR, events)

        assert [row.running_balance for row in rows] == [Decimal("2000"), Decimal("0")]

    def test_negative_opening_balance(self) -> None:
        """선수금 (기초 잔액 음수)"""
        events = [
            make_event(1, EventKind.OPENING, "250", sign=-1),
            make_event(1, EventKind.INVOICE, "100"),
        ]

        assert final_balance(PartyType.CUSTOMER, events) == Decimal("-150")

    def test_idempotent(self) -> None:
        events = [
            make_event(1, EventKind.OPENING, "10"),
            make_event(2, EventKind.INVOICE, "20.50"),
            make_event(3, EventKind.RECEIVED, "5.25"),
        ]

        assert reconcile(PartyType.CUSTOMER, events) == reconcile(PartyType.CUSTOMER, events)

    def test_final_balance_equals_sum_of_effects(self) -> None:
        events = [
            make_event(1, EventKind.OPENING, "100"),
            make_event(2, EventKind.INVOICE, "40"),
            make_event(3, EventKind.PAID, "15"),
            make_event(4, EventKind.RECEIVED, "70"),
        ]

        total = sum((signed_effect(PartyType.CUSTOMER, e) for e in events), Decimal("0"))

        assert final_balance(PartyType.CUSTOMER, events) == total == Decimal("85")


class TestBalanceWindows:
    """기간 경계 잔액"""

    def setup_method(self) -> None:
        self.events = [
            make_event(1, EventKind.OPENING, "1000"),
            make_event(1, EventKind.INVOICE, "500"),
            make_event(2, EventKind.RECEIVED, "300"),
            make_event(10, EventKind.INVOICE, "50"),
        ]

    def test_balance_before(self) -> None:
        rows = reconcile(PartyType.CUSTOMER, self.events)

        assert balance_before(rows, date(2024, 1, 1)) == Decimal("1000")
        assert balance_before(rows, date(2024, 1, 2)) == Decimal("1500")
        assert balance_before(rows, date(2024, 1, 5)) == Decimal("1200")
        assert balance_before(rows, date(2024, 12, 31)) == Decimal("1250")

    def test_balance_before_without_rows(self) -> None:
        assert balance_before([], date(2024, 1, 1)) == Decimal("0")

    def test_balance_as_of_includes_the_day(self) -> None:
        assert balance_as_of(PartyType.CUSTOMER, self.events, date(2024, 1, 2)) == Decimal("1200")
        assert balance_as_of(PartyType.CUSTOMER, self.events, date(2024, 1, 9)) == Decimal("1200")
        assert balance_as_of(PartyType.CUSTOMER, self.events, date(2024, 1, 10)) == Decimal("1250")

    def test_balance_as_of_before_history_keeps_opening(self) -> None:
        assert balance_as_of(PartyType.CUSTOMER, self.events, date(2023, 12, 1)) == Decimal("1000")

    def test_balance_as_of_max_date(self) -> None:
        assert balance_as_of(PartyType.CUSTOMER, self.events, date.max) == Decimal("1250")
