"""
Protocol 인터페이스 테스트

Protocol 타입 검증 및 구현 확인.
"""

from pathlib import Path

from adapters.db.document_store import SQLiteLedgerStore
from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import ILedgerStore
from adapters.mock.ledger_store import MockLedgerStore


REQUIRED_METHODS = [
    "fetch_entities",
    "fetch_entity",
    "fetch_invoices",
    "fetch_purchases",
    "fetch_transactions",
]


class TestILedgerStore:
    """ILedgerStore Protocol 테스트"""

    def test_mock_store_implements_protocol(self) -> None:
        """Mock 저장소가 Protocol을 구현하는지 확인"""
        assert isinstance(MockLedgerStore(), ILedgerStore)

    def test_sqlite_store_implements_protocol(self, temp_dir: Path) -> None:
        """SQLite 문서 저장소가 Protocol을 구현하는지 확인"""
        store = SQLiteLedgerStore(SQLiteAdapter(temp_dir / "ledger.db"), "shop_uid_001")

        assert isinstance(store, ILedgerStore)

    def test_protocol_has_required_methods(self) -> None:
        store = MockLedgerStore()

        for method_name in REQUIRED_METHODS:
            assert callable(getattr(store, method_name, None)), f"Missing method: {method_name}"

    def test_plain_object_does_not_match(self) -> None:
        assert not isinstance(object(), ILedgerStore)
