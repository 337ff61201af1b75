# 📄 File: app/modules/plant_identification/domain/models/identification.py
# 🧭 Purpose (Layman Explanation):
# Describes what a scanned photo, a guessed plant species, and a finished identification look like,
# so every part of the plant scanner speaks the same language.
# 🧪 Purpose (Technical Summary):
# Immutable pydantic domain models for the identification pipeline: normalized image, classifier
# suggestions, catalog rows, gate outcome, cached results, scan records and the caller-facing response.
# 🔗 Dependencies:
# pydantic, datetime, typing, uuid
# 🔄 Connected Modules / Calls From:
# image_normalizer.py, plantnet_client.py, result_cache.py, confidence_gate.py, catalog_enricher.py,
# scan_recorder.py, identification_service.py, API schemas

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NormalizedImage(BaseModel):
    """
    Canonical JPEG produced by the image normalizer.

    The fingerprint is the SHA-256 hex digest of the full output buffer and is
    the only thing the result cache keys on.
    """
    model_config = ConfigDict(frozen=True)

    data: bytes
    content_type: str = "image/jpeg"
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    fingerprint: str = Field(..., min_length=64, max_length=64)
    source_url: Optional[str] = None

    @property
    def byte_length(self) -> int:
        return len(self.data)

    @property
    def cache_key(self) -> str:
        return f"plant:identify:{self.fingerprint}"


class RawSuggestion(BaseModel):
    """One classifier candidate, validated at the HTTP boundary."""
    model_config = ConfigDict(frozen=True)

    scientific_name: str = Field(..., min_length=1)
    common_name: Optional[str] = None
    confidence: float = Field(..., ge=0.0, le=1.0)

    @field_validator("scientific_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("scientific_name must not be blank")
        return v


class SpeciesSuggestion(BaseModel):
    """
    Candidate species shown to the user.

    Local catalog fields (species_id, care_profile, description, image_url)
    are only present when enrichment found the species.
    """
    model_config = ConfigDict(frozen=True)

    scientific_name: str
    common_name: Optional[str] = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    species_id: Optional[str] = None
    care_profile: Optional[Dict[str, Any]] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: RawSuggestion) -> "SpeciesSuggestion":
        return cls(
            scientific_name=raw.scientific_name,
            common_name=raw.common_name,
            confidence=raw.confidence,
        )


class CatalogSpecies(BaseModel):
    """Row of the local species catalog (plant_species)."""
    model_config = ConfigDict(frozen=True)

    id: str
    scientific_name: str
    common_name: Optional[str] = None
    care_profile: Optional[Dict[str, Any]] = None
    description: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)

    @property
    def primary_image_url(self) -> Optional[str]:
        return self.image_urls[0] if self.image_urls else None


class GateResult(BaseModel):
    """Outcome of the confidence gate. Rejection is a normal result."""
    model_config = ConfigDict(frozen=True)

    accepted: bool
    suggestions: List[SpeciesSuggestion] = Field(default_factory=list)
    best_confidence: float = 0.0


class IdentificationResult(BaseModel):
    """
    Finished identification.

    all_suggestions is ranked by descending confidence, ties keep the
    classifier's order. top_suggestion is None only when there are none.
    """
    model_config = ConfigDict(frozen=True)

    scan_id: Optional[str] = None
    top_suggestion: Optional[SpeciesSuggestion] = None
    all_suggestions: List[SpeciesSuggestion] = Field(default_factory=list)
    image_url: Optional[str] = None
    threshold_met: bool = False
    confidence: float = 0.0
    fingerprint: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class CacheEntry(BaseModel):
    """Cached result with its absolute expiry time (epoch seconds)."""
    model_config = ConfigDict(frozen=True)

    result: IdentificationResult
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class ScanRecord(BaseModel):
    """Append-only record of one completed identification."""
    model_config = ConfigDict(frozen=True)

    scan_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: Optional[str] = None
    image_url: Optional[str] = None
    result_species_id: Optional[str] = None
    result_species_name: Optional[str] = None
    confidence: float = 0.0
    suggested_species: List[SpeciesSuggestion] = Field(default_factory=list)
    threshold_met: bool = False
    image_fingerprint: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_result(cls, result: IdentificationResult, user_id: Optional[str] = None) -> "ScanRecord":
        top = result.top_suggestion
        return cls(
            user_id=user_id,
            image_url=result.image_url,
            result_species_id=top.species_id if top else None,
            result_species_name=top.scientific_name if top else None,
            confidence=result.confidence,
            suggested_species=list(result.all_suggestions),
            threshold_met=result.threshold_met,
            image_fingerprint=result.fingerprint,
        )


class IdentificationResponse(BaseModel):
    """Caller-facing envelope: {success, data?, error?}."""

    success: bool
    data: Optional[IdentificationResult] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
