# 📄 File: app/api/v1/router.py
# 🧭 Purpose (Layman Explanation):
# Directs every version 1 request to the right place: health checks to the health handlers
# and plant photos to the plant scanner.
# 🧪 Purpose (Technical Summary):
# API v1 router aggregation combining the health router and module routers under their prefixes.
# 🔗 Dependencies:
# FastAPI, app.api.v1.health, app.modules.plant_identification.presentation.api.v1
# 🔄 Connected Modules / Calls From:
# app.main.py

from fastapi import APIRouter

from app.modules.plant_identification.presentation.api.v1.identification import identification_router

from . import API_TAGS, ROUTE_PREFIXES, get_api_info
from .health import health_router

api_v1_router = APIRouter()

api_v1_router.include_router(
    health_router,
    tags=[API_TAGS["health"]]
)

api_v1_router.include_router(
    identification_router,
    prefix=ROUTE_PREFIXES["identification"],
    tags=[API_TAGS["identification"]]
)


@api_v1_router.get("/",
                   summary="API v1 Information",
                   tags=["API Info"])
async def api_v1_info() -> dict:
    """Version details and available routes."""
    return get_api_info()
