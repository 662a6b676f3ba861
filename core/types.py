"""
타입 정의 모듈

거래처(Party) 관련 공통 Enum 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class PartyType(str, Enum):
    """거래처 유형 (고객 / 공급처)"""

    CUSTOMER = "customer"
    VENDOR = "vendor"

    @classmethod
    def parse(cls, value: "str | PartyType") -> "PartyType":
        """문자열/Enum을 PartyType으로 변환

        대소문자 및 복수형("customers", "vendors") 허용.

        Raises:
            ValueError: 알 수 없는 거래처 유형
        """
        if isinstance(value, PartyType):
            return value
        normalized = str(value).strip().lower()
        if normalized.endswith("s"):
            normalized = normalized[:-1]
        return cls(normalized)


class TransactionDirection(str, Enum):
    """결제 방향

    RECEIVED: 거래처로부터 수금
    PAID: 거래처에 지급
    """

    RECEIVED = "received"
    PAID = "paid"
