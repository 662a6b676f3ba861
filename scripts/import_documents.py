"""
문서 저장소 가져오기

원본 앱에서 내보낸 JSON을 로컬 문서 저장소(SQLite)에 적재한다.

JSON 형식 (컬렉션 → 문서 ID → 문서 본문):
    {
        "customers": {"c1": {"opticalName": "Vision Opticals", "openingBalance": 1000}},
        "sales": {"s1": {"customerId": "c1", "invoiceDate": "2024-01-01", "totalAmount": 500}},
        "purchases": {},
        "transactions": {"t1": {"entityId": "c1", "type": "received", "amount": 300, "date": "2024-01-02"}}
    }

문서 목록 형식 ([{"id": "c1", ...}, ...])도 허용.

사용법:
    python -m scripts.import_documents --file export.json
    python -m scripts.import_documents --file export.json --tenant uid123 --db data/shop_ledger.db
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.document_store import SQLiteLedgerStore
from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.constants import Collections
from core.logging import setup_logging

logger = logging.getLogger(__name__)

KNOWN_COLLECTIONS = (
    Collections.ENTITIES,
    Collections.INVOICES,
    Collections.PURCHASES,
    Collections.TRANSACTIONS,
)


class ImportFormatError(Exception):
    """가져오기 파일 형식 오류"""

    pass


def _as_documents(collection: str, raw: Any) -> dict[str, dict[str, Any]]:
    if isinstance(raw, dict):
        documents = raw
    elif isinstance(raw, list):
        documents = {}
        for item in raw:
            if not isinstance(item, dict) or not item.get("id"):
                raise ImportFormatError(f"'{collection}' 목록 항목에 id가 없습니다")
            body = dict(item)
            documents[str(body.pop("id"))] = body
    else:
        raise ImportFormatError(f"'{collection}'는 매핑 또는 목록이어야 합니다")

    for doc_id, body in documents.items():
        if not isinstance(body, dict):
            raise ImportFormatError(f"'{collection}/{doc_id}' 문서는 매핑이어야 합니다")
    return {str(doc_id): body for doc_id, body in documents.items()}


def load_export(path: Path) -> dict[str, dict[str, dict[str, Any]]]:
    """내보내기 JSON 로드

    Raises:
        ImportFormatError: JSON 파싱 실패 또는 형식 오류
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"JSON 파싱 실패: {e}") from e

    if not isinstance(data, dict):
        raise ImportFormatError("최상위는 컬렉션 이름 → 문서 매핑이어야 합니다")

    export: dict[str, dict[str, dict[str, Any]]] = {}
    for collection, raw in data.items():
        if collection not in KNOWN_COLLECTIONS:
            logger.warning(f"알 수 없는 컬렉션 건너뜀: {collection}")
            continue
        export[collection] = _as_documents(collection, raw)
    return export


async def import_documents(
    store: SQLiteLedgerStore,
    export: dict[str, dict[str, dict[str, Any]]],
) -> dict[str, int]:
    """컬렉션별 문서 적재

    Returns:
        컬렉션별 저장 문서 수
    """
    counts: dict[str, int] = {}
    for collection, documents in export.items():
        counts[collection] = await store.put_documents(collection, documents) if documents else 0
        logger.info(f"{collection}: {counts[collection]}건 적재")
    return counts


async def run(file: Path, tenant_id: str, db_path: Path) -> dict[str, int]:
    export = load_export(file)
    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        store = SQLiteLedgerStore(db, tenant_id)
        return await import_documents(store, export)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="원본 앱 JSON 내보내기를 문서 저장소에 적재")
    parser.add_argument("--file", type=Path, required=True, help="내보내기 JSON 경로")
    parser.add_argument("--tenant", default=None, help="테넌트 ID (기본: settings.yaml)")
    parser.add_argument("--db", type=Path, default=None, help="DB 경로 (기본: settings.yaml)")
    args = parser.parse_args(argv)

    setup_logging("cli")
    settings = get_settings()
    tenant_id = args.tenant or settings.tenant_id
    db_path = args.db or settings.db_path

    if not args.file.exists():
        logger.error(f"파일을 찾을 수 없습니다: {args.file}")
        return 1

    try:
        counts = asyncio.run(run(args.file, tenant_id, db_path))
    except ImportFormatError as e:
        logger.error(f"가져오기 실패: {e}")
        return 1

    logger.info(f"가져오기 완료: tenant={tenant_id}, 총 {sum(counts.values())}건")
    return 0


if __name__ == "__main__":
    sys.exit(main())
