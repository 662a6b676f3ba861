"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
Web(읽기)과 가져오기 스크립트(쓰기)가 동시에 접근 가능하도록 설정.

문서 저장소 스키마: 문서 하나 = 한 행 (JSON 본문)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    if readonly:
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)
        # WAL 모드 설정 (읽기 전용 연결에서는 변경 불가)
        await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (Web 조회용)

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as adapter:
        async with adapter.transaction():
            await adapter.execute("INSERT INTO ...")
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        return await self._conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._conn.commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        try:
            yield self._conn
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    Args:
        adapter: 연결된 SQLiteAdapter (쓰기 가능)
    """
    # document: 컬렉션 경로(users/{tenant}/{collection}) + 문서 ID
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS document (
            path         TEXT NOT NULL,
            doc_id       TEXT NOT NULL,
            data_json    TEXT NOT NULL,
            created_at   TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at   TEXT NOT NULL DEFAULT (datetime('now')),
            PRIMARY KEY (path, doc_id)
        )
    """)

    # 거래처별 조회 인덱스 (판매: customerId, 매입: vendorId, 결제: entityId)
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_document_customer
        ON document (path, json_extract(data_json, '$.customerId'))
    """)
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_document_vendor
        ON document (path, json_extract(data_json, '$.vendorId'))
    """)
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_document_entity
        ON document (path, json_extract(data_json, '$.entityId'))
    """)

    await adapter.commit()
    logger.info("스키마 초기화 완료")
