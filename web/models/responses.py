"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
금액은 모두 문자열 (Decimal 정밀도 유지).
"""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    tenant_id: str = Field(..., description="문서 저장소 테넌트")
    version: str = Field(..., description="API 버전")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class PartyResponse(BaseModel):
    """거래처 응답"""

    entity_id: str = Field(..., description="거래처 ID")
    display_name: str = Field(..., description="거래처 이름")
    party_type: str = Field(..., description="거래처 유형 (customer/vendor)")
    opening_balance: str = Field(..., description="기초 잔액")


class PartyListResponse(BaseModel):
    """거래처 목록 응답"""

    parties: list[PartyResponse] = Field(default_factory=list, description="거래처 목록")
    total_count: int = Field(..., description="거래처 수")


class LedgerRowResponse(BaseModel):
    """원장 행 응답"""

    date: str = Field(..., description="날짜 (YYYY-MM-DD)")
    kind: str = Field(..., description="이벤트 종류 (invoice/purchase/received/paid)")
    particulars: str = Field(..., description="적요")
    reference: str | None = Field(default=None, description="청구서 번호 / 메모")
    debit: str | None = Field(default=None, description="차변 (잔액 증가)")
    credit: str | None = Field(default=None, description="대변 (잔액 감소)")
    balance: str = Field(..., description="누적 잔액")
    source_id: str | None = Field(default=None, description="원본 레코드 ID")


class WarningResponse(BaseModel):
    """정규화 경고 (제외된 레코드)"""

    source: str = Field(..., description="레코드 출처 (invoice/purchase/transaction)")
    record_id: str | None = Field(default=None, description="레코드 ID")
    reason: str = Field(..., description="제외 사유")


class StatementResponse(BaseModel):
    """기간 원장 (계정 명세서) 응답"""

    entity_id: str = Field(..., description="거래처 ID")
    display_name: str = Field(..., description="거래처 이름")
    party_type: str = Field(..., description="거래처 유형")
    from_date: str = Field(..., description="시작일")
    to_date: str = Field(..., description="종료일")
    opening_carry: str = Field(..., description="이월 잔액")
    closing_balance: str = Field(..., description="기말 잔액")
    total_debit: str = Field(..., description="차변 합계")
    total_credit: str = Field(..., description="대변 합계")
    rows: list[LedgerRowResponse] = Field(default_factory=list, description="원장 행")
    warnings: list[WarningResponse] = Field(default_factory=list, description="제외된 레코드")


class BalanceResponse(BaseModel):
    """거래처 잔액 응답"""

    entity_id: str = Field(..., description="거래처 ID")
    as_of: str | None = Field(default=None, description="기준일 (없으면 전체 이력)")
    balance: str = Field(..., description="잔액")


class SummaryRowResponse(BaseModel):
    """잔액 요약 행"""

    entity_id: str = Field(..., description="거래처 ID")
    display_name: str = Field(..., description="거래처 이름")
    party_type: str = Field(..., description="거래처 유형")
    balance: str = Field(..., description="기준일 잔액")
    degraded: bool = Field(default=False, description="조회 실패 여부")
    error: str | None = Field(default=None, description="실패 사유")
    warning_count: int = Field(default=0, description="제외된 레코드 수")


class OutstandingResponse(BaseModel):
    """미수/미지급 잔액 요약 응답"""

    party_type: str = Field(..., description="거래처 유형")
    as_of: str = Field(..., description="기준일")
    rows: list[SummaryRowResponse] = Field(default_factory=list, description="잔액 내림차순")
    total_balance: str = Field(..., description="정상 행 잔액 합계")
    degraded_count: int = Field(default=0, description="조회 실패 거래처 수")
