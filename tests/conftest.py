"""
pytest 공통 fixture 정의

임시 디렉토리, settings.yaml, Mock 원장 저장소
"""

import tempfile
from pathlib import Path

import pytest

from adapters.mock.ledger_store import MockLedgerStore
from core.config.loader import Settings


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def reset_settings():
    """테스트 간 Settings 싱글턴 격리"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = f"""# 테스트용 settings.yaml
tenant_id: "shop_uid_001"
db_path: "{(temp_dir / 'ledger.db').as_posix()}"

web:
  host: 0.0.0.0
  port: 9000

logging:
  level: debug

ledger:
  summary_concurrency: 4
  entity_timeout_sec: 2.5
  request_timeout_sec: 30
  include_amount_paid: true
  utc_offset_minutes: 0
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def ledger_store() -> MockLedgerStore:
    """고객 2명 + 공급처 1곳이 등록된 Mock 저장소

    - c1 (Vision Opticals): 기초 1000, 1/1 판매 500, 1/2 수금 300 → 1200
    - c2 (Eye Care Centre): 기초 0, 1/5 판매 250 → 250
    - v1 (Lens Supplier): 2/1 매입 2000, 2/3 지급 2000 → 0
    """
    store = MockLedgerStore()

    store.add_entity("c1", {"opticalName": "Vision Opticals", "openingBalance": 1000})
    store.add_invoice("s1", {
        "customerId": "c1",
        "invoiceDate": "2024-01-01",
        "totalAmount": 500,
        "invoiceNumber": "INV-001",
    })
    store.add_transaction("t1", {
        "entityId": "c1",
        "type": "received",
        "amount": 300,
        "date": "2024-01-02",
        "paymentMethod": "cash",
    })

    store.add_entity("c2", {"opticalName": "Eye Care Centre"})
    store.add_invoice("s2", {
        "customerId": "c2",
        "invoiceDate": "2024-01-05",
        "total": "250.00",
        "invoiceNumber": "INV-002",
    })

    store.add_entity("v1", {"opticalName": "Lens Supplier", "type": "vendor"})
    store.add_purchase("p1", {"vendorId": "v1", "purchaseDate": "2024-02-01", "totalAmount": 2000})
    store.add_transaction("t2", {"entityId": "v1", "type": "paid", "amount": 2000, "date": "2024-02-03"})

    return store
