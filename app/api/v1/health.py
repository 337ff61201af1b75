# 📄 File: app/api/v1/health.py
# 🧭 Purpose (Layman Explanation):
# Lets monitoring tools ask "is the plant scanner alive, and can it reach its database?"
# 🧪 Purpose (Technical Summary):
# Liveness and readiness endpoints. Readiness probes the database connection manager held on app.state.
# 🔗 Dependencies:
# FastAPI, app.state (settings, db_manager, identification_service)
# 🔄 Connected Modules / Calls From:
# app.api.v1.router, load balancers, container orchestration probes

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

health_router = APIRouter()

_app_start_time = datetime.now(timezone.utc)


@health_router.get("/health",
                   summary="Basic Health Check",
                   description="Liveness check for load balancers and monitoring")
async def health_check(request: Request) -> JSONResponse:
    """Returns OK as long as the process is serving requests."""
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": "plant-scanner-api",
            "version": request.app.state.settings.APP_VERSION,
            "uptime_seconds": int((datetime.now(timezone.utc) - _app_start_time).total_seconds()),
        }
    )


@health_router.get("/health/ready",
                   summary="Readiness Check",
                   description="Checks the database and the identification service")
async def readiness_check(request: Request) -> JSONResponse:
    db_manager = getattr(request.app.state, "db_manager", None)
    database = await db_manager.health_check() if db_manager else {"status": "not_configured"}
    service_ready = getattr(request.app.state, "identification_service", None) is not None

    ready = service_ready and database.get("status") == "healthy"
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {
                "database": database,
                "identification_service": "ready" if service_ready else "not_initialized",
            },
        }
    )
