"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from writequest import __version__
from writequest.llm.client import LLMClient
from writequest.web.deps import get_llm_client
from writequest.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(client: LLMClient = Depends(get_llm_client)) -> HealthResponse:
    """Check API health status."""
    return HealthResponse(
        status="ok",
        version=__version__,
        llm_configured=client.is_configured(),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
