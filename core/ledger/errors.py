"""
장부 예외 정의

호출자가 "재시도 불가(중단)"와 "입력 수정 필요"를 구분할 수 있도록
예외를 계층화한다. 개별 레코드 문제(파싱 실패, 거래처 조회 실패)는
예외가 아니라 결과 데이터(경고, degraded 행)로 보고된다.
"""

from datetime import date
from typing import Any


class LedgerError(Exception):
    """장부 엔진 기본 예외"""

    pass


class NotFoundError(LedgerError):
    """조회 대상 없음"""

    pass


class EntityNotFoundError(NotFoundError):
    """알 수 없는 거래처 ID

    호출자는 ID를 수정하지 않고 재시도하면 안 된다.
    """

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"Entity not found: {entity_id}")


class LedgerValidationError(LedgerError):
    """요청 값 검증 실패 (부분 계산 없이 즉시 반환)"""

    pass


class InvalidRangeError(LedgerValidationError):
    """잘못된 기간 (from > to 또는 날짜 파싱 불가)"""

    def __init__(self, message: str, from_date: Any = None, to_date: Any = None):
        self.from_date = from_date
        self.to_date = to_date
        super().__init__(message)


class InvalidAsOfDateError(LedgerValidationError):
    """잘못된 기준일 ("as of" 날짜 파싱 불가)"""

    def __init__(self, raw: Any, reason: str):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Invalid 'as of' date {raw!r}: {reason}")


class InvalidPartyTypeError(LedgerValidationError):
    """알 수 없는 거래처 유형"""

    def __init__(self, raw: Any):
        self.raw = raw
        super().__init__(f"Invalid party type: {raw!r}")


class UnsupportedEventError(LedgerError):
    """부호 규칙표에 없는 (거래처 유형, 이벤트 종류) 조합"""

    def __init__(self, party_type: str, kind: str, event_date: date | None = None):
        self.party_type = party_type
        self.kind = kind
        self.event_date = event_date
        super().__init__(f"No sign convention for {party_type}/{kind}")


class LedgerStoreError(LedgerError):
    """원장 저장소 조회 실패"""

    pass
