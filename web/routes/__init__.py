"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- ledger: 거래처 원장 (명세서, 잔액, 잔액 요약, CSV 내보내기)
"""
