"""Health check endpoints."""

from fastapi import APIRouter, HTTPException, Request
from starlette import status

from core.database import check_db_connection, comprehensive_health_check
from core.ratelimit import limiter
from schemas import DetailedHealthResponse, HealthResponse, PoolStatusResponse

SERVICE_NAME = "laundry-admin-api"

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(status="healthy", service=SERVICE_NAME)


@router.get("/health/detailed", response_model=DetailedHealthResponse)
@limiter.limit("30/minute")
async def health_detailed(request: Request) -> DetailedHealthResponse:
    """Database reachability and connection pool metrics.

    Always returns 200; callers inspect ``status`` and ``database``.
    """
    result = await comprehensive_health_check(request.app.state.engine)

    pool_status = None
    if result["pool"] is not None:
        pool_status = PoolStatusResponse(
            pool_size=result["pool"].pool_size,
            checked_out=result["pool"].checked_out,
            overflow=result["pool"].overflow,
            checked_in=result["pool"].checked_in,
        )

    return DetailedHealthResponse(
        status="healthy" if result["database"] else "unhealthy",
        service=SERVICE_NAME,
        database=result["database"],
        pool=pool_status,
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"description": "Startup failed or database unreachable"}},
)
@limiter.limit("30/minute")
async def ready(request: Request) -> HealthResponse:
    """Readiness probe: 200 once startup finished and the database answers."""
    init_error = getattr(request.app.state, "init_error", None)
    if init_error:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Initialization failed: {init_error}",
        )

    if not getattr(request.app.state, "init_done", False):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Starting",
        )

    try:
        await check_db_connection(request.app.state.engine)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from e

    return HealthResponse(status="ready", service=SERVICE_NAME)
