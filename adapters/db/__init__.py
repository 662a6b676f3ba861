"""
데이터베이스 어댑터

SQLite WAL 모드 연결 관리 및 문서 저장소 구현.
"""

from adapters.db.document_store import SQLiteLedgerStore, collection_path
from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    create_connection,
    init_schema,
)

__all__ = [
    "SQLiteAdapter",
    "SQLiteLedgerStore",
    "collection_path",
    "create_connection",
    "init_schema",
]
