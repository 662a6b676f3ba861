"""
기간 원장 조회 서비스 테스트
"""

from datetime import date
from decimal import Decimal

import pytest

from adapters.mock.ledger_store import MockLedgerStore
from core.ledger.errors import (
    EntityNotFoundError,
    InvalidAsOfDateError,
    InvalidRangeError,
    LedgerStoreError,
    NotFoundError,
)
from core.ledger.range_query import RangeQueryService
from core.ledger.types import EventKind


@pytest.fixture
def service(ledger_store: MockLedgerStore) -> RangeQueryService:
    return RangeQueryService(ledger_store)


class TestGetRangeLedger:
    """get_range_ledger"""

    @pytest.mark.asyncio
    async def test_full_history(self, service: RangeQueryService) -> None:
        """기초 1000 + 판매 500 - 수금 300"""
        result = await service.get_range_ledger("c1", "2024-01-01", "2024-01-31")

        assert result.entity.display_name == "Vision Opticals"
        assert result.opening_carry == Decimal("1000")
        assert [row.kind for row in result.rows] == [EventKind.INVOICE, EventKind.RECEIVED]
        assert [row.running_balance for row in result.rows] == [Decimal("1500"), Decimal("1200")]
        assert result.closing_balance == Decimal("1200")
        assert result.total_debit == Decimal("500")
        assert result.total_credit == Decimal("300")

    @pytest.mark.asyncio
    async def test_window_carries_prior_history(self, service: RangeQueryService) -> None:
        """기간 이전 이벤트는 이월 잔액으로 합산"""
        result = await service.get_range_ledger("c1", "2024-01-02", "2024-01-31")

        assert result.opening_carry == Decimal("1500")
        assert len(result.rows) == 1
        assert result.rows[0].running_balance == Decimal("1200")

    @pytest.mark.asyncio
    async def test_empty_window(self, service: RangeQueryService) -> None:
        result = await service.get_range_ledger("c1", "2024-06-01", "2024-06-30")

        assert result.rows == []
        assert result.opening_carry == Decimal("1200")
        assert result.closing_balance == Decimal("1200")

    @pytest.mark.asyncio
    async def test_window_before_history(self, service: RangeQueryService) -> None:
        """이력 이전 기간: 기초 잔액만 이월"""
        result = await service.get_range_ledger("c1", "2023-01-01", "2023-12-31")

        assert result.rows == []
        assert result.opening_carry == Decimal("1000")

    @pytest.mark.asyncio
    async def test_adjacent_windows_are_continuous(self, ledger_store: MockLedgerStore) -> None:
        """[a, b] 종료 잔액 == [b+1, c] 이월 잔액"""
        ledger_store.add_invoice("s9", {"customerId": "c1", "invoiceDate": "2024-01-20", "totalAmount": 75})
        service = RangeQueryService(ledger_store)

        first = await service.get_range_ledger("c1", "2024-01-01", "2024-01-10")
        second = await service.get_range_ledger("c1", "2024-01-11", "2024-01-31")
        whole = await service.get_range_ledger("c1", "2024-01-01", "2024-01-31")

        assert first.closing_balance == second.opening_carry
        assert second.closing_balance == whole.closing_balance == Decimal("1275")
        assert [r.running_balance for r in first.rows + second.rows] == [
            r.running_balance for r in whole.rows
        ]

    @pytest.mark.asyncio
    async def test_single_day_window(self, service: RangeQueryService) -> None:
        result = await service.get_range_ledger("c1", date(2024, 1, 2), date(2024, 1, 2))

        assert [row.kind for row in result.rows] == [EventKind.RECEIVED]

    @pytest.mark.asyncio
    async def test_vendor_statement(self, service: RangeQueryService) -> None:
        result = await service.get_range_ledger("v1", "2024-02-01", "2024-02-28")

        assert [row.running_balance for row in result.rows] == [Decimal("2000"), Decimal("0")]
        assert result.closing_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_warnings_returned(self, ledger_store: MockLedgerStore) -> None:
        ledger_store.add_invoice("bad", {"customerId": "c2", "invoiceDate": "someday", "totalAmount": 1})
        service = RangeQueryService(ledger_store)

        result = await service.get_range_ledger("c2", "2024-01-01", "2024-12-31")

        assert result.closing_balance == Decimal("250.00")
        assert [w.record_id for w in result.warnings] == ["bad"]

    @pytest.mark.asyncio
    async def test_malformed_timestamp_record_becomes_warning(self) -> None:
        """nanoseconds가 숫자가 아닌 Timestamp JSON은 경고로 제외"""
        store = MockLedgerStore()
        store.add_entity("c9", {"opticalName": "Clear View"})
        store.add_invoice("ok", {"customerId": "c9", "invoiceDate": "2024-01-01", "totalAmount": 150})
        store.add_invoice("broken", {
            "customerId": "c9",
            "invoiceDate": {"seconds": 1704067200, "nanoseconds": "x"},
            "totalAmount": 90,
        })

        result = await RangeQueryService(store).get_range_ledger("c9", "2024-01-01", "2024-12-31")

        assert result.closing_balance == Decimal("150")
        assert [w.record_id for w in result.warnings] == ["broken"]

    @pytest.mark.asyncio
    async def test_zero_entity(self, ledger_store: MockLedgerStore) -> None:
        """기초 잔액 0, 이벤트 없음 → 잔액 0"""
        ledger_store.add_entity("c0", {"opticalName": "New Optics", "openingBalance": 0})
        service = RangeQueryService(ledger_store)

        result = await service.get_range_ledger("c0", "2024-01-01", "2024-12-31")

        assert result.rows == []
        assert result.opening_carry == Decimal("0")
        assert result.closing_balance == Decimal("0")
        assert await service.get_balance("c0") == Decimal("0")


class TestRangeValidation:
    """요청 검증"""

    @pytest.mark.asyncio
    async def test_from_after_to(self, service: RangeQueryService, ledger_store: MockLedgerStore) -> None:
        with pytest.raises(InvalidRangeError):
            await service.get_range_ledger("c1", "2024-02-01", "2024-01-01")

        # 저장소 조회 없이 즉시 실패
        assert ledger_store.state.call_counts == {}

    @pytest.mark.asyncio
    async def test_unparseable_bound(self, service: RangeQueryService) -> None:
        with pytest.raises(InvalidRangeError) as exc_info:
            await service.get_range_ledger("c1", "2024-01-01", "end of month")

        assert exc_info.value.to_date == "end of month"

    @pytest.mark.asyncio
    async def test_unknown_entity(self, service: RangeQueryService) -> None:
        with pytest.raises(EntityNotFoundError) as exc_info:
            await service.get_range_ledger("nobody", "2024-01-01", "2024-01-31")

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.entity_id == "nobody"

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, ledger_store: MockLedgerStore) -> None:
        ledger_store.fail_on("fetch_invoices", "c1")
        service = RangeQueryService(ledger_store)

        with pytest.raises(LedgerStoreError):
            await service.get_range_ledger("c1", "2024-01-01", "2024-01-31")


class TestGetBalance:
    """get_balance"""

    @pytest.mark.asyncio
    async def test_all_history(self, service: RangeQueryService) -> None:
        assert await service.get_balance("c1") == Decimal("1200")

    @pytest.mark.asyncio
    async def test_as_of(self, service: RangeQueryService) -> None:
        assert await service.get_balance("c1", "2024-01-01") == Decimal("1500")

    @pytest.mark.asyncio
    async def test_invalid_as_of(self, service: RangeQueryService) -> None:
        with pytest.raises(InvalidAsOfDateError):
            await service.get_balance("c1", "tomorrow")

    @pytest.mark.asyncio
    async def test_unknown_entity(self, service: RangeQueryService) -> None:
        with pytest.raises(EntityNotFoundError):
            await service.get_balance("nobody")
