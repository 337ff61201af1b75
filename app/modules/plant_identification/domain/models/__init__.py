# 📄 File: app/modules/plant_identification/domain/models/__init__.py
# 🧭 Purpose (Layman Explanation):
# Collects the descriptions of photos, plant guesses, and scan results in one place.
# 🧪 Purpose (Technical Summary):
# Re-exports the identification domain models.
# 🔗 Dependencies:
# identification.py
# 🔄 Connected Modules / Calls From:
# Domain services, infrastructure adapters, presentation schemas

from .identification import (
    CacheEntry,
    CatalogSpecies,
    GateResult,
    IdentificationResponse,
    IdentificationResult,
    NormalizedImage,
    RawSuggestion,
    ScanRecord,
    SpeciesSuggestion,
)

__all__ = [
    "CacheEntry",
    "CatalogSpecies",
    "GateResult",
    "IdentificationResponse",
    "IdentificationResult",
    "NormalizedImage",
    "RawSuggestion",
    "ScanRecord",
    "SpeciesSuggestion",
]
