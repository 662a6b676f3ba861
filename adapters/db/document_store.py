"""
SQLite 문서 저장소

ILedgerStore 구현. 테넌트(매장 사용자)별 컬렉션 경로
users/{tenant_id}/{collection} 아래의 JSON 문서를 조회한다.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping

import aiosqlite

from adapters.models import (
    INVOICE_PARTY_FIELD,
    PURCHASE_PARTY_FIELD,
    TRANSACTION_PARTY_FIELD,
    decode_document,
    encode_document,
    entity_from_document,
    with_id,
)
from core.constants import Collections
from core.ledger.errors import LedgerStoreError
from core.ledger.types import Entity
from core.types import PartyType

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


def collection_path(tenant_id: str, collection: str) -> str:
    """테넌트 컬렉션 경로

    Example:
        >>> collection_path("uid123", "sales")
        'users/uid123/sales'
    """
    if not tenant_id or "/" in tenant_id:
        raise ValueError(f"Invalid tenant id: {tenant_id!r}")
    return f"users/{tenant_id}/{collection}"


class SQLiteLedgerStore:
    """SQLite 기반 원장 저장소

    Args:
        db: SQLite 어댑터 (연결 상태)
        tenant_id: 테넌트 ID (매장 사용자 UID)
    """

    def __init__(self, db: SQLiteAdapter, tenant_id: str):
        self.db = db
        self.tenant_id = tenant_id

    def _path(self, collection: str) -> str:
        return collection_path(self.tenant_id, collection)

    # -------------------------------------------------------------------------
    # ILedgerStore
    # -------------------------------------------------------------------------

    async def fetch_entities(self, party_type: PartyType) -> list[Entity]:
        """거래처 목록 조회 (표시 이름순)"""
        rows = await self._fetch_rows(
            "SELECT doc_id, data_json FROM document WHERE path = ? ORDER BY doc_id",
            (self._path(Collections.ENTITIES),),
        )

        entities = []
        for doc_id, data_json in rows:
            entity = entity_from_document(doc_id, decode_document(data_json))
            if entity is not None and entity.party_type == party_type:
                entities.append(entity)

        entities.sort(key=lambda e: e.display_name.lower())
        return entities

    async def fetch_entity(self, entity_id: str) -> Entity | None:
        """거래처 단건 조회"""
        rows = await self._fetch_rows(
            "SELECT doc_id, data_json FROM document WHERE path = ? AND doc_id = ?",
            (self._path(Collections.ENTITIES), entity_id),
        )
        if not rows:
            return None
        doc_id, data_json = rows[0]
        return entity_from_document(doc_id, decode_document(data_json))

    async def fetch_invoices(self, entity_id: str) -> list[dict[str, Any]]:
        """판매 레코드 조회 (customerId 기준)"""
        return await self._fetch_by_party(Collections.INVOICES, INVOICE_PARTY_FIELD, entity_id)

    async def fetch_purchases(self, entity_id: str) -> list[dict[str, Any]]:
        """매입 레코드 조회 (vendorId 기준)"""
        return await self._fetch_by_party(Collections.PURCHASES, PURCHASE_PARTY_FIELD, entity_id)

    async def fetch_transactions(self, entity_id: str) -> list[dict[str, Any]]:
        """결제 레코드 조회 (entityId 기준)"""
        return await self._fetch_by_party(
            Collections.TRANSACTIONS, TRANSACTION_PARTY_FIELD, entity_id
        )

    # -------------------------------------------------------------------------
    # 쓰기 (가져오기 스크립트 / 테스트용)
    # -------------------------------------------------------------------------

    async def put_document(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
    ) -> None:
        """문서 저장 (있으면 덮어쓰기)"""
        await self.put_documents(collection, {doc_id: data})

    async def put_documents(
        self,
        collection: str,
        documents: Mapping[str, Mapping[str, Any]],
    ) -> int:
        """문서 일괄 저장

        Returns:
            저장된 문서 수
        """
        path = self._path(collection)
        params = [
            (path, doc_id, encode_document(data))
            for doc_id, data in documents.items()
        ]

        async with self.db.transaction():
            await self.db.executemany(
                """
                INSERT INTO document (path, doc_id, data_json)
                VALUES (?, ?, ?)
                ON CONFLICT(path, doc_id) DO UPDATE SET
                    data_json = excluded.data_json,
                    updated_at = datetime('now')
                """,
                params,
            )

        logger.debug(f"문서 {len(params)}건 저장: {path}")
        return len(params)

    async def count_documents(self, collection: str) -> int:
        """컬렉션 문서 수"""
        try:
            row = await self.db.fetchone(
                "SELECT COUNT(*) FROM document WHERE path = ?",
                (self._path(collection),),
            )
        except (aiosqlite.Error, RuntimeError) as e:
            raise LedgerStoreError(f"문서 수 조회 실패: {e}") from e
        return row[0] if row else 0

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    async def _fetch_by_party(
        self,
        collection: str,
        party_field: str,
        entity_id: str,
    ) -> list[dict[str, Any]]:
        rows = await self._fetch_rows(
            f"""
            SELECT doc_id, data_json FROM document
            WHERE path = ? AND json_extract(data_json, '$.{party_field}') = ?
            ORDER BY rowid
            """,
            (self._path(collection), entity_id),
        )
        return [with_id(doc_id, decode_document(data_json)) for doc_id, data_json in rows]

    async def _fetch_rows(
        self,
        sql: str,
        parameters: tuple[Any, ...],
    ) -> list[tuple[Any, ...]]:
        try:
            return await self.db.fetchall(sql, parameters)
        except (aiosqlite.Error, RuntimeError) as e:
            raise LedgerStoreError(f"문서 조회 실패: {e}") from e
