"""
어댑터 레이어

외부 서비스(문서 저장소)와의 연동을 담당.
Protocol 기반 인터페이스로 Mock 교체 가능.
"""

from adapters.interfaces import ILedgerStore
from adapters.models import entity_from_document, party_type_of

__all__ = [
    # Interfaces
    "ILedgerStore",
    # Models
    "entity_from_document",
    "party_type_of",
]
