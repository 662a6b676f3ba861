"""
CSV 내보내기

기간 원장(명세서 / 청구서 원장)과 잔액 요약을 CSV 문자열로 변환.
모든 필드는 따옴표로 감싸고, 금액은 통화 기호/천 단위 구분 없이 소수점 2자리.
"""

import csv
import io
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable

from core.constants import LedgerThresholds
from core.ledger.reconciler import signed_effect
from core.ledger.types import EventKind, RangeResult, SummaryRow
from core.types import PartyType
from core.utils.timezone import format_date

STATEMENT_HEADER = ["Date", "Particulars", "Reference", "Debit", "Credit", "Balance"]
INVOICE_LEDGER_HEADER = ["Date", "Type", "Reference", "Amount"]
SUMMARY_HEADER = ["Party", "Party Type", "Balance", "Degraded"]

PARTICULARS: dict[EventKind, str] = {
    EventKind.OPENING: "Opening Balance",
    EventKind.INVOICE: "Invoice",
    EventKind.PURCHASE: "Purchase",
    EventKind.RECEIVED: "Payment Received",
    EventKind.PAID: "Payment Made",
}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


class ExportView(str, Enum):
    """기간 원장 내보내기 형식"""

    STATEMENT = "statement"  # 계정 명세서 (차변/대변/잔액)
    INVOICE = "invoice"  # 청구서 원장 (종류/금액)


def format_amount(amount: Decimal) -> str:
    """금액 문자열 (예: Decimal("1500") → "1500.00")"""
    return f"{amount.quantize(LedgerThresholds.AMOUNT_QUANT, rounding=ROUND_HALF_UP):f}"


def _write(header: list[str], rows: Iterable[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def statement_to_csv(result: RangeResult) -> str:
    """계정 명세서 CSV

    첫 행은 기간 시작일의 이월 잔액(Opening Balance).
    차변/대변은 부호 규칙표 기준 (잔액 증가 = Debit, 감소 = Credit).
    """
    party_type = result.entity.party_type
    lines: list[list[str]] = [
        [
            format_date(result.from_date),
            PARTICULARS[EventKind.OPENING],
            "-",
            "",
            "",
            format_amount(result.opening_carry),
        ]
    ]

    for row in result.rows:
        effect = signed_effect(party_type, row.event)
        lines.append(
            [
                format_date(row.date),
                PARTICULARS[row.kind],
                row.event.reference or "-",
                format_amount(effect) if effect >= 0 else "",
                format_amount(-effect) if effect < 0 else "",
                format_amount(row.running_balance),
            ]
        )

    return _write(STATEMENT_HEADER, lines)


def invoice_ledger_to_csv(result: RangeResult) -> str:
    """청구서 원장 CSV (판매/매입은 종류 그대로, 결제는 Payment)"""
    lines: list[list[str]] = []
    for row in result.rows:
        if row.kind in (EventKind.INVOICE, EventKind.PURCHASE):
            label = PARTICULARS[row.kind]
        else:
            label = "Payment"
        lines.append(
            [
                format_date(row.date),
                label,
                row.event.reference or "-",
                format_amount(row.amount),
            ]
        )
    return _write(INVOICE_LEDGER_HEADER, lines)


def summary_to_csv(rows: Iterable[SummaryRow]) -> str:
    """잔액 요약 CSV

    마지막 행은 정상 행 잔액 합계 (degraded 행은 합계에서 제외).
    """
    lines: list[list[str]] = []
    total = Decimal("0")
    for row in rows:
        if not row.degraded:
            total += row.balance
        lines.append(
            [
                row.display_name,
                row.party_type.value,
                format_amount(row.balance),
                "yes" if row.degraded else "no",
            ]
        )
    lines.append(["Total Balance", "", format_amount(total), ""])
    return _write(SUMMARY_HEADER, lines)


def _safe_name(name: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", name).strip("_") or "party"


def export_filename(view: ExportView, name: str, from_date: date, to_date: date) -> str:
    """기간 원장 파일명

    Example:
        >>> export_filename(ExportView.STATEMENT, "Vision Opticals", date(2024, 1, 1), date(2024, 1, 31))
        'Account_Statement_Vision_Opticals_2024-01-01_to_2024-01-31.csv'
    """
    prefix = "Account_Statement" if view is ExportView.STATEMENT else "Invoice_Ledger"
    return f"{prefix}_{_safe_name(name)}_{format_date(from_date)}_to_{format_date(to_date)}.csv"


def summary_filename(party_type: PartyType, as_of: date) -> str:
    """잔액 요약 파일명 (예: Balance_Due_customer_2024-03-31.csv)"""
    return f"Balance_Due_{party_type.value}_{format_date(as_of)}.csv"
