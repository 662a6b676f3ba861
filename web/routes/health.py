"""
헬스 체크 엔드포인트

GET /health - 서버 상태 확인
"""

from fastapi import APIRouter, Depends

from core.config.loader import Settings
from core.utils.timezone import now_utc
from web.dependencies import get_app_settings
from web.models.responses import HealthResponse

API_VERSION = "1.0.0"

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """서버 상태 확인

    Returns:
        HealthResponse: status, tenant_id, version, timestamp
    """
    return HealthResponse(
        status="ok",
        tenant_id=settings.tenant_id,
        version=API_VERSION,
        timestamp=now_utc(),
    )
