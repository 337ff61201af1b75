# 📄 File: app/modules/plant_identification/presentation/api/schemas/identification_schemas.py
# 🧭 Purpose (Layman Explanation):
# Describes exactly what the app must send to identify a plant and what it gets back.
#
# 🧪 Purpose (Technical Summary):
# Pydantic request/response schemas for the identification endpoints, with OpenAPI examples.
#
# 🔗 Dependencies:
# - pydantic, domain models (IdentificationResult)
#
# 🔄 Connected Modules / Calls From:
# - presentation/api/v1/identification.py

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ....domain.models.identification import IdentificationResponse, IdentificationResult


class IdentifyRequest(BaseModel):
    """Request body for identify and retry."""

    image: str = Field(..., description="Base64 image data URI or http(s) image URL")
    user_id: Optional[str] = Field(None, max_length=64, description="Owner of the scan, omitted for anonymous scans")
    organ: Optional[str] = Field(None, description="Organ hint for the classifier (leaf, flower, fruit, bark)")

    @field_validator("image")
    @classmethod
    def image_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("image must not be empty")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "image": "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQ...",
                "user_id": "u1",
                "organ": "leaf",
            }
        }
    )


class ClearCacheRequest(BaseModel):
    """Request body for dropping a cached identification."""

    image: str = Field(..., description="Same image value that was identified")


class IdentifyResponse(BaseModel):
    """Identification envelope. success is False with data for low-confidence results."""

    success: bool
    data: Optional[IdentificationResult] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def from_domain(cls, response: IdentificationResponse) -> "IdentifyResponse":
        return cls(**response.model_dump())

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "data": {
                    "scan_id": "6f1c1a4e-0b1f-4a43-9d55-5e1c2f0c9a11",
                    "top_suggestion": {
                        "scientific_name": "Monstera deliciosa",
                        "common_name": "Swiss Cheese Plant",
                        "confidence": 0.92,
                        "species_id": "sp-1",
                    },
                    "all_suggestions": [],
                    "image_url": "https://example.supabase.co/storage/v1/object/public/plant-images/scans/u1/x.jpg",
                    "threshold_met": True,
                    "confidence": 0.92,
                },
            }
        }
    )


class ClearCacheResponse(BaseModel):
    success: bool = True
    cleared: bool


class StatsResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]
