"""
문서 ↔ 도메인 변환

문서 저장소의 원본 문서(dict)를 장부 엔진 타입으로 변환.
SQLite 저장소와 Mock 저장소가 같은 변환 규칙을 공유한다.

거래처 문서 (customers 컬렉션):
    opticalName: 표시 이름 (없으면 name)
    type: "vendor"면 공급처, 그 외는 고객
    openingBalance: 기초 잔액 (부호 포함)
    _placeholder / isDeleted: 거래처 아님
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping

from core.ledger.normalizer import is_excluded, parse_amount
from core.ledger.types import Entity
from core.types import PartyType

logger = logging.getLogger(__name__)

# 거래처 ID를 담는 필드 (컬렉션별)
INVOICE_PARTY_FIELD = "customerId"
PURCHASE_PARTY_FIELD = "vendorId"
TRANSACTION_PARTY_FIELD = "entityId"


def party_type_of(data: Mapping[str, Any]) -> PartyType:
    """거래처 문서의 유형 판별"""
    if str(data.get("type", "")).strip().lower() == PartyType.VENDOR.value:
        return PartyType.VENDOR
    return PartyType.CUSTOMER


def entity_from_document(doc_id: str, data: Mapping[str, Any]) -> Entity | None:
    """거래처 문서 → Entity

    Returns:
        Entity 또는 None (플레이스홀더/삭제 문서)
    """
    if is_excluded(data):
        return None

    raw_opening = data.get("openingBalance")
    opening = parse_amount(raw_opening)
    if opening is None:
        if raw_opening not in (None, ""):
            logger.warning(
                f"기초 잔액 파싱 실패, 0으로 처리: {doc_id}",
                extra={"raw_value": repr(raw_opening)},
            )
        opening = Decimal("0")

    return Entity(
        id=doc_id,
        display_name=str(data.get("opticalName") or data.get("name") or doc_id),
        party_type=party_type_of(data),
        opening_balance=opening,
    )


def with_id(doc_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
    """문서 ID를 "id" 키로 포함한 사본 (원본 dict는 변경하지 않음)"""
    record = dict(data)
    record["id"] = doc_id
    return record


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_document(data: Mapping[str, Any]) -> str:
    """문서 → JSON 문자열 (datetime/Decimal 포함 허용)"""
    return json.dumps(dict(data), default=_json_default, ensure_ascii=False)


def decode_document(data_json: str) -> dict[str, Any]:
    """JSON 문자열 → 문서"""
    return json.loads(data_json)
