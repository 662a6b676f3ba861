"""
이벤트 정규화기 (Event Normalizer)

문서 저장소의 이질적인 레코드(판매, 매입, 결제)를 LedgerEvent로 변환.

레코드마다 필드 이름이 다르다 (totalAmount / total / amount,
invoiceDate / purchaseDate / date / createdAt). 필드 우선순위는
SOURCE_FIELDS 한 곳에서만 정의하고 레코드당 한 번만 평가한다.

제외 규칙:
- 소프트 삭제/플레이스홀더 레코드: 조용히 제외
- 날짜/금액 파싱 불가, 알 수 없는 결제 방향, 부호 규칙 없는 조합:
  제외 + NormalizationWarning 보고
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Mapping

from core.constants import Defaults
from core.ledger.reconciler import is_supported
from core.ledger.types import (
    EventKind,
    LedgerEvent,
    NormalizationResult,
    NormalizationWarning,
    RecordSource,
)
from core.types import PartyType, TransactionDirection
from core.utils.timezone import IST, DateParseFailure, parse_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFields:
    """출처별 필드 매핑 (우선순위 순)"""

    date_fields: tuple[str, ...]
    amount_fields: tuple[str, ...]
    reference_fields: tuple[str, ...] = ()
    paid_field: str | None = None


SOURCE_FIELDS: dict[RecordSource, SourceFields] = {
    RecordSource.INVOICE: SourceFields(
        date_fields=("invoiceDate", "date"),
        amount_fields=("totalAmount", "total", "amount"),
        reference_fields=("invoiceNumber",),
        paid_field="amountPaid",
    ),
    RecordSource.PURCHASE: SourceFields(
        date_fields=("purchaseDate", "date"),
        amount_fields=("totalAmount", "total", "amount"),
        reference_fields=("invoiceNumber", "purchaseNumber"),
        paid_field="amountPaid",
    ),
    RecordSource.TRANSACTION: SourceFields(
        date_fields=("date", "createdAt"),
        amount_fields=("amount",),
        reference_fields=("notes", "paymentMethod"),
    ),
}

# 소프트 삭제 / 플레이스홀더 표시 필드
EXCLUSION_MARKERS: tuple[str, ...] = ("isDeleted", "deleted", "_placeholder")

# 판매/매입 시점 결제액이 만드는 이벤트 종류
_SETTLEMENT_KIND: dict[RecordSource, EventKind] = {
    RecordSource.INVOICE: EventKind.RECEIVED,
    RecordSource.PURCHASE: EventKind.PAID,
}

# 기초 잔액만 있고 다른 레코드가 없을 때의 날짜
OPENING_FALLBACK_DATE = date.min


class _RecordRejected(Exception):
    """레코드 제외 사유 (모듈 내부 전용)"""

    def __init__(self, reason: str, raw_value: Any = None):
        self.reason = reason
        self.raw_value = raw_value
        super().__init__(reason)


def parse_amount(value: Any) -> Decimal | None:
    """금액 파싱 (실패 시 None)

    float은 str()을 거쳐 변환하여 이진 오차 유입을 막는다.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite():
        return None
    return amount


def is_excluded(record: Mapping[str, Any]) -> bool:
    """소프트 삭제 / 플레이스홀더 레코드 여부"""
    return any(bool(record.get(marker)) for marker in EXCLUSION_MARKERS)


def _present(record: Mapping[str, Any], fields: Iterable[str]) -> list[tuple[str, Any]]:
    return [
        (name, record[name])
        for name in fields
        if record.get(name) is not None and record.get(name) != ""
    ]


class EventNormalizer:
    """원본 레코드 → LedgerEvent 변환기

    Args:
        tz: 매장 시간대 (날짜 경계 기준)
        include_amount_paid: 판매/매입의 amountPaid를 별도 결제 이벤트로 반영

    사용 예시:
    ```python
    normalizer = EventNormalizer()
    result = normalizer.normalize(
        PartyType.CUSTOMER,
        Decimal("1000"),
        invoices=[{"id": "s1", "invoiceDate": "2024-01-01", "totalAmount": 500}],
        purchases=[],
        transactions=[],
        entity_id="c1",
    )
    result.events    # [opening, invoice]
    result.warnings  # []
    ```
    """

    def __init__(
        self,
        tz: timezone = IST,
        include_amount_paid: bool = Defaults.INCLUDE_AMOUNT_PAID,
    ):
        self.tz = tz
        self.include_amount_paid = include_amount_paid

    def normalize(
        self,
        party_type: PartyType,
        opening_balance: Decimal,
        invoices: Iterable[Mapping[str, Any]],
        purchases: Iterable[Mapping[str, Any]],
        transactions: Iterable[Mapping[str, Any]],
        entity_id: str = "",
    ) -> NormalizationResult:
        """원본 레코드를 LedgerEvent 목록으로 변환

        Args:
            party_type: 거래처 유형
            opening_balance: 기초 잔액 (부호 포함)
            invoices: 판매 레코드
            purchases: 매입 레코드
            transactions: 결제 레코드
            entity_id: 이벤트에 기록할 거래처 ID

        Returns:
            NormalizationResult (events: 입력 순서 유지, warnings)
        """
        result = NormalizationResult()

        handlers: list[tuple[RecordSource, Iterable[Mapping[str, Any]], Callable[..., list[LedgerEvent]]]] = [
            (RecordSource.INVOICE, invoices, self._from_bill),
            (RecordSource.PURCHASE, purchases, self._from_bill),
            (RecordSource.TRANSACTION, transactions, self._from_transaction),
        ]

        for source, records, handler in handlers:
            for record in records:
                if is_excluded(record):
                    continue
                try:
                    events = handler(source, party_type, entity_id, record)
                except _RecordRejected as rejected:
                    result.warnings.append(
                        NormalizationWarning(
                            source=source,
                            record_id=_record_id(record),
                            reason=rejected.reason,
                            raw_value=rejected.raw_value,
                        )
                    )
                    continue
                result.events.extend(events)

        opening = self._opening_event(party_type, opening_balance, entity_id, result.events)
        if opening is not None:
            result.events.insert(0, opening)

        if result.warnings:
            logger.warning(
                f"정규화 경고 {len(result.warnings)}건: 레코드 제외",
                extra={
                    "entity_id": entity_id,
                    "party_type": party_type.value,
                    "reasons": sorted({w.reason for w in result.warnings}),
                },
            )

        return result

    # -------------------------------------------------------------------------
    # 출처별 핸들러
    # -------------------------------------------------------------------------

    def _from_bill(
        self,
        source: RecordSource,
        party_type: PartyType,
        entity_id: str,
        record: Mapping[str, Any],
    ) -> list[LedgerEvent]:
        """판매/매입 레코드 변환 (+ 선택적 결제액 이벤트)"""
        fields = SOURCE_FIELDS[source]
        kind = EventKind.INVOICE if source is RecordSource.INVOICE else EventKind.PURCHASE
        self._require_supported(party_type, kind)

        event_date = self._resolve_date(record, fields)
        amount = self._resolve_amount(record, fields)
        reference = self._resolve_reference(record, fields)
        record_id = _record_id(record)

        events = [
            LedgerEvent(
                entity_id=entity_id,
                date=event_date,
                kind=kind,
                amount=abs(amount),
                source_id=record_id,
                reference=reference,
            )
        ]

        if self.include_amount_paid and fields.paid_field:
            paid = parse_amount(record.get(fields.paid_field))
            settlement_kind = _SETTLEMENT_KIND[source]
            if paid and is_supported(party_type, settlement_kind):
                events.append(
                    LedgerEvent(
                        entity_id=entity_id,
                        date=event_date,
                        kind=settlement_kind,
                        amount=abs(paid),
                        source_id=record_id,
                        reference=reference,
                    )
                )

        return events

    def _from_transaction(
        self,
        source: RecordSource,
        party_type: PartyType,
        entity_id: str,
        record: Mapping[str, Any],
    ) -> list[LedgerEvent]:
        """결제 레코드 변환 (type: received / paid)"""
        fields = SOURCE_FIELDS[source]
        raw_type = record.get("type")
        try:
            direction = TransactionDirection(str(raw_type).strip().lower())
        except ValueError:
            raise _RecordRejected("unknown transaction type", raw_type)

        kind = EventKind(direction.value)
        self._require_supported(party_type, kind)

        return [
            LedgerEvent(
                entity_id=entity_id,
                date=self._resolve_date(record, fields),
                kind=kind,
                amount=abs(self._resolve_amount(record, fields)),
                source_id=_record_id(record),
                reference=self._resolve_reference(record, fields),
            )
        ]

    def _opening_event(
        self,
        party_type: PartyType,
        opening_balance: Decimal,
        entity_id: str,
        events: list[LedgerEvent],
    ) -> LedgerEvent | None:
        """기초 잔액 이벤트 (0이면 생성하지 않음)

        날짜는 가장 이른 레코드 날짜. 같은 날짜에서는 종류 우선순위로 가장 먼저 정렬된다.
        """
        if not opening_balance:
            return None
        self._require_supported(party_type, EventKind.OPENING)

        earliest = min((e.date for e in events), default=OPENING_FALLBACK_DATE)
        return LedgerEvent(
            entity_id=entity_id,
            date=earliest,
            kind=EventKind.OPENING,
            amount=abs(opening_balance),
            sign=1 if opening_balance > 0 else -1,
            reference="Opening Balance",
        )

    # -------------------------------------------------------------------------
    # 필드 해석
    # -------------------------------------------------------------------------

    def _resolve_date(self, record: Mapping[str, Any], fields: SourceFields) -> date:
        candidates = _present(record, fields.date_fields)
        if not candidates:
            raise _RecordRejected("missing date")

        failures: list[DateParseFailure] = []
        for _, value in candidates:
            parsed = parse_date(value, self.tz)
            if isinstance(parsed, DateParseFailure):
                failures.append(parsed)
                continue
            return parsed

        raise _RecordRejected(f"unparseable date ({failures[0].reason})", failures[0].raw)

    def _resolve_amount(self, record: Mapping[str, Any], fields: SourceFields) -> Decimal:
        candidates = _present(record, fields.amount_fields)
        if not candidates:
            raise _RecordRejected("missing amount")

        for _, value in candidates:
            amount = parse_amount(value)
            if amount is not None:
                return amount

        raise _RecordRejected("unparseable amount", candidates[0][1])

    def _resolve_reference(self, record: Mapping[str, Any], fields: SourceFields) -> str | None:
        for _, value in _present(record, fields.reference_fields):
            return str(value)
        return None

    @staticmethod
    def _require_supported(party_type: PartyType, kind: EventKind) -> None:
        if not is_supported(party_type, kind):
            raise _RecordRejected(f"no sign convention for {party_type.value}/{kind.value}")


def _record_id(record: Mapping[str, Any]) -> str | None:
    record_id = record.get("id")
    return str(record_id) if record_id is not None else None


def normalize(
    party_type: PartyType,
    opening_balance: Decimal,
    invoices: Iterable[Mapping[str, Any]],
    purchases: Iterable[Mapping[str, Any]],
    transactions: Iterable[Mapping[str, Any]],
    entity_id: str = "",
    tz: timezone = IST,
    include_amount_paid: bool = Defaults.INCLUDE_AMOUNT_PAID,
) -> NormalizationResult:
    """EventNormalizer 단축 함수"""
    normalizer = EventNormalizer(tz=tz, include_amount_paid=include_amount_paid)
    return normalizer.normalize(
        party_type,
        opening_balance,
        invoices,
        purchases,
        transactions,
        entity_id=entity_id,
    )
