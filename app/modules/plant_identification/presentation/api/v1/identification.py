# 📄 File: app/modules/plant_identification/presentation/api/v1/identification.py
# 🧭 Purpose (Layman Explanation):
# The web doors of the plant scanner: send a photo (as text, a link, or a file upload), retry a scan,
# forget a remembered answer, or look at how the scanner is doing.
#
# 🧪 Purpose (Technical Summary):
# FastAPI endpoints forwarding to IdentificationService. Pipeline exceptions propagate to the
# application-level PlantCareException handler, which renders {success: false, error, error_code}.
#
# 🔗 Dependencies:
# - FastAPI router, UploadFile, Form
# - identification_schemas, dependencies
#
# 🔄 Connected Modules / Calls From:
# - app.api.v1.router (mounted under /api/v1)

"""
Identification API Endpoints

Endpoints:
- POST /identify: Identify a plant from a data URI or image URL
- POST /identify/upload: Identify a plant from a multipart file upload
- POST /identify/retry: Identify again, bypassing the cached result
- DELETE /identify/cache: Drop the cached result for an image
- GET /identify/stats: Pipeline counters
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ....domain.services.identification_service import IdentificationService
from ...dependencies import get_identification_service
from ..schemas.identification_schemas import (
    ClearCacheRequest,
    ClearCacheResponse,
    IdentifyRequest,
    IdentifyResponse,
    StatsResponse,
)

logger = logging.getLogger(__name__)

identification_router = APIRouter()

ERROR_RESPONSES = {
    400: {"description": "Photo could not be processed"},
    499: {"description": "Identification cancelled"},
    503: {"description": "Identification service unavailable"},
}


@identification_router.post(
    "",
    response_model=IdentifyResponse,
    response_model_exclude_none=True,
    summary="Identify a plant",
    description="Identify the plant in a base64 data URI or an http(s) image URL",
    responses=ERROR_RESPONSES,
)
async def identify_plant(
    body: IdentifyRequest,
    service: IdentificationService = Depends(get_identification_service),
) -> IdentifyResponse:
    response = await service.identify(body.image, user_id=body.user_id, organ=body.organ)
    return IdentifyResponse.from_domain(response)


@identification_router.post(
    "/upload",
    response_model=IdentifyResponse,
    response_model_exclude_none=True,
    summary="Identify a plant from an uploaded photo",
    responses=ERROR_RESPONSES,
)
async def identify_plant_upload(
    file: UploadFile = File(..., description="Plant photo"),
    user_id: Optional[str] = Form(None),
    organ: Optional[str] = Form(None),
    service: IdentificationService = Depends(get_identification_service),
) -> IdentifyResponse:
    """Raw bytes path: the uploaded file is normalized like any other input."""
    data = await file.read()
    logger.info(f"Identification upload received: {file.filename} ({len(data)} bytes)")
    response = await service.identify(data, user_id=user_id, organ=organ)
    return IdentifyResponse.from_domain(response)


@identification_router.post(
    "/retry",
    response_model=IdentifyResponse,
    response_model_exclude_none=True,
    summary="Retry an identification",
    description="Drop the cached result for the image and ask the classifier again",
    responses=ERROR_RESPONSES,
)
async def retry_identification(
    body: IdentifyRequest,
    service: IdentificationService = Depends(get_identification_service),
) -> IdentifyResponse:
    response = await service.retry_identification(body.image, user_id=body.user_id, organ=body.organ)
    return IdentifyResponse.from_domain(response)


@identification_router.delete(
    "/cache",
    response_model=ClearCacheResponse,
    summary="Clear a cached identification",
    responses={400: ERROR_RESPONSES[400]},
)
async def clear_identification_cache(
    body: ClearCacheRequest,
    service: IdentificationService = Depends(get_identification_service),
) -> ClearCacheResponse:
    cleared = await service.clear_cache(body.image)
    return ClearCacheResponse(cleared=cleared)


@identification_router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Identification pipeline statistics",
)
async def identification_stats(
    service: IdentificationService = Depends(get_identification_service),
) -> StatsResponse:
    return StatsResponse(data=await service.get_stats())
