"""
미수/미지급 잔액 요약 서비스 테스트

기준일 잔액, epsilon 필터, 정렬, 부분 실패(degraded), 동시성 제한 검증
"""

import logging
from decimal import Decimal

import pytest

from adapters.mock.ledger_store import MockLedgerStore
from core.constants import LedgerThresholds
from core.ledger.errors import InvalidAsOfDateError, InvalidPartyTypeError, LedgerStoreError
from core.ledger.outstanding import OutstandingSummaryService, is_outstanding
from core.ledger.range_query import RangeQueryService
from core.ledger.types import SummaryRow
from core.types import PartyType


def make_vendor_store(count: int) -> MockLedgerStore:
    """공급처 count곳, 각각 매입 (i+1) * 100"""
    store = MockLedgerStore()
    for i in range(count):
        vendor_id = f"v{i:02d}"
        store.add_entity(vendor_id, {"opticalName": f"Vendor {i:02d}", "type": "vendor"})
        store.add_purchase(None, {
            "vendorId": vendor_id,
            "purchaseDate": "2024-01-10",
            "totalAmount": (i + 1) * 100,
        })
    return store


class TestOutstandingSummary:
    """get_outstanding_summary"""

    @pytest.mark.asyncio
    async def test_customer_balances_sorted_descending(self, ledger_store: MockLedgerStore) -> None:
        service = OutstandingSummaryService(ledger_store)

        rows = await service.get_outstanding_summary("customer", "2024-12-31")

        assert [(row.entity_id, row.balance) for row in rows] == [
            ("c1", Decimal("1200")),
            ("c2", Decimal("250.00")),
        ]
        assert all(not row.degraded for row in rows)

    @pytest.mark.asyncio
    async def test_as_of_includes_whole_day(self, ledger_store: MockLedgerStore) -> None:
        """기준일 당일 이벤트 포함, 다음날 이벤트 제외"""
        service = OutstandingSummaryService(ledger_store)

        rows = await service.get_outstanding_summary(PartyType.CUSTOMER, "2024-01-01")

        assert [(row.entity_id, row.balance) for row in rows] == [("c1", Decimal("1500"))]

    @pytest.mark.asyncio
    async def test_settled_vendor_excluded(self, ledger_store: MockLedgerStore) -> None:
        service = OutstandingSummaryService(ledger_store)

        assert await service.get_outstanding_summary("vendor", "2024-02-28") == []
        rows = await service.get_outstanding_summary("vendors", "2024-02-02")
        assert [(row.entity_id, row.balance) for row in rows] == [("v1", Decimal("2000"))]

    @pytest.mark.asyncio
    async def test_epsilon_filter(self) -> None:
        """|잔액| < 0.01 제외, 0.01은 포함"""
        store = MockLedgerStore()
        store.add_entity("tiny", {"opticalName": "Tiny", "openingBalance": "0.005"})
        store.add_entity("cent", {"opticalName": "Cent", "openingBalance": "0.01"})
        store.add_entity("credit", {"opticalName": "Credit", "openingBalance": "-40"})
        service = OutstandingSummaryService(store)

        rows = await service.get_outstanding_summary("customer", "2024-01-01")

        assert [row.entity_id for row in rows] == ["cent", "credit"]

    @pytest.mark.asyncio
    async def test_no_entities(self) -> None:
        service = OutstandingSummaryService(MockLedgerStore())

        assert await service.get_outstanding_summary("customer", "2024-01-01") == []

    @pytest.mark.asyncio
    async def test_zero_entity_has_no_row(self, ledger_store: MockLedgerStore) -> None:
        """기초 잔액 0, 이벤트 없음 → 행 없음"""
        ledger_store.add_entity("c0", {"opticalName": "New Optics", "openingBalance": 0})
        service = OutstandingSummaryService(ledger_store)

        rows = await service.get_outstanding_summary("customer", "2024-12-31")

        assert "c0" not in [row.entity_id for row in rows]
        assert [row.entity_id for row in rows] == ["c1", "c2"]

    @pytest.mark.asyncio
    async def test_malformed_record_does_not_degrade(self, ledger_store: MockLedgerStore) -> None:
        """날짜를 해석할 수 없는 레코드는 경고 수로만 집계"""
        ledger_store.add_invoice("broken", {
            "customerId": "c2",
            "invoiceDate": {"seconds": 1704067200, "nanoseconds": "x"},
            "totalAmount": 90,
        })
        service = OutstandingSummaryService(ledger_store)

        rows = await service.get_outstanding_summary("customer", "2024-12-31")

        row = next(r for r in rows if r.entity_id == "c2")
        assert not row.degraded
        assert row.balance == Decimal("250.00")
        assert row.warning_count == 1

    @pytest.mark.asyncio
    async def test_placeholder_entities_skipped(self, ledger_store: MockLedgerStore) -> None:
        ledger_store.add_entity("ph", {"opticalName": "Placeholder", "_placeholder": True, "openingBalance": 10})
        service = OutstandingSummaryService(ledger_store)

        rows = await service.get_outstanding_summary("customer", "2024-12-31")

        assert "ph" not in [row.entity_id for row in rows]


class TestOutstandingValidation:
    """요청 검증"""

    @pytest.mark.asyncio
    async def test_invalid_as_of(self, ledger_store: MockLedgerStore) -> None:
        service = OutstandingSummaryService(ledger_store)

        with pytest.raises(InvalidAsOfDateError):
            await service.get_outstanding_summary("customer", "last friday")

        assert ledger_store.state.call_counts == {}

    @pytest.mark.asyncio
    async def test_invalid_party_type(self, ledger_store: MockLedgerStore) -> None:
        service = OutstandingSummaryService(ledger_store)

        with pytest.raises(InvalidPartyTypeError):
            await service.get_outstanding_summary("supplier", "2024-01-01")

    @pytest.mark.asyncio
    async def test_entity_listing_failure_is_fatal(self, ledger_store: MockLedgerStore) -> None:
        ledger_store.state.fail_entity_listing = True
        service = OutstandingSummaryService(ledger_store)

        with pytest.raises(LedgerStoreError):
            await service.get_outstanding_summary("customer", "2024-01-01")

    def test_concurrency_must_be_positive(self, ledger_store: MockLedgerStore) -> None:
        with pytest.raises(ValueError):
            OutstandingSummaryService(ledger_store, concurrency=0)


class TestPartialFailure:
    """거래처별 실패 격리"""

    @pytest.mark.asyncio
    async def test_one_failing_vendor_of_fifty(self, caplog: pytest.LogCaptureFixture) -> None:
        """50곳 중 1곳 실패 → 정상 49 + degraded 1"""
        store = make_vendor_store(50)
        store.fail_on("fetch_transactions", "v07")
        service = OutstandingSummaryService(store, concurrency=8)

        with caplog.at_level(logging.WARNING, logger="core.ledger.outstanding"):
            rows = await service.get_outstanding_summary("vendor", "2024-01-31")

        assert len(rows) == 50
        degraded = [row for row in rows if row.degraded]
        assert [row.entity_id for row in degraded] == ["v07"]
        assert degraded[0].balance == Decimal("0")
        assert "LedgerStoreError" in degraded[0].error
        assert rows[0].balance == Decimal("5000")
        assert any("v07" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_timeout_produces_degraded_row(self, ledger_store: MockLedgerStore) -> None:
        ledger_store.delay_on("c2", 1.0)
        service = OutstandingSummaryService(ledger_store, entity_timeout=0.05)

        rows = await service.get_outstanding_summary("customer", "2024-12-31")

        by_id = {row.entity_id: row for row in rows}
        assert by_id["c2"].degraded
        assert "timed out" in by_id["c2"].error
        assert by_id["c1"].balance == Decimal("1200")
        assert not by_id["c1"].degraded

    @pytest.mark.asyncio
    async def test_fan_out_is_bounded(self) -> None:
        """동시에 조회 중인 거래처 수 <= concurrency (거래처당 3개 컬렉션 조회)"""
        store = make_vendor_store(20)
        for i in range(20):
            store.delay_on(f"v{i:02d}", 0.01)
        service = OutstandingSummaryService(store, concurrency=4)

        rows = await service.get_outstanding_summary("vendor", "2024-01-31")

        assert len(rows) == 20
        assert store.state.max_in_flight <= 4 * 3
        assert store.state.call_counts["fetch_purchases"] == 20


class TestContinuityWithRangeLedger:
    """요약 잔액 == 이력 시작부터 기준일까지의 기간 원장 종료 잔액"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "as_of",
        [
            "2023-12-31",  # 첫 레코드 이전
            "2024-01-01",  # 레코드 당일
            "2024-01-03",  # 레코드 사이
            "2024-01-05",
            "2024-02-02",
            "2024-12-31",
        ],
    )
    @pytest.mark.parametrize(
        "party_type, entity_id",
        [
            (PartyType.CUSTOMER, "c1"),
            (PartyType.CUSTOMER, "c2"),
            (PartyType.VENDOR, "v1"),
        ],
    )
    async def test_summary_matches_range_closing(
        self,
        ledger_store: MockLedgerStore,
        party_type: PartyType,
        entity_id: str,
        as_of: str,
    ) -> None:
        range_result = await RangeQueryService(ledger_store).get_range_ledger(
            entity_id, "2000-01-01", as_of
        )
        rows = await OutstandingSummaryService(ledger_store).get_outstanding_summary(party_type, as_of)

        summary = {row.entity_id: row.balance for row in rows}
        if abs(range_result.closing_balance) < LedgerThresholds.BALANCE_EPSILON:
            assert entity_id not in summary
        else:
            assert summary[entity_id] == range_result.closing_balance


class TestIsOutstanding:
    """is_outstanding"""

    def test_degraded_always_shown(self) -> None:
        row = SummaryRow("e1", "E1", PartyType.CUSTOMER, Decimal("0"), degraded=True, error="x")

        assert is_outstanding(row)

    def test_negative_balance_shown(self) -> None:
        row = SummaryRow("e1", "E1", PartyType.CUSTOMER, Decimal("-0.01"))

        assert is_outstanding(row)
