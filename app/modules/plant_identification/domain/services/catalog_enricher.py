# 📄 File: app/modules/plant_identification/domain/services/catalog_enricher.py
# 🧭 Purpose (Layman Explanation):
# Adds what we already know about each guessed plant (its usual name, care tips, a picture)
# from our own plant encyclopedia, without holding up the answer if the encyclopedia is slow.
# 🧪 Purpose (Technical Summary):
# Best-effort join of suggestions to the local species catalog by exact scientific name.
# Lookups run concurrently, each bounded by a timeout; any failure degrades to the unenriched suggestion.
# 🔗 Dependencies:
# asyncio, SpeciesCatalogRepository, structured logging
# 🔄 Connected Modules / Calls From:
# identification_service.py

import asyncio
from typing import List, Sequence

from app.shared.utils.logging import get_logger

from ..models.identification import SpeciesSuggestion
from ..repositories.species_catalog_repository import SpeciesCatalogRepository

logger = get_logger(__name__)


class CatalogEnricher:
    """Enriches suggestions with local catalog data."""

    def __init__(self, catalog: SpeciesCatalogRepository, lookup_timeout: float = 2.0):
        self.catalog = catalog
        self.lookup_timeout = lookup_timeout
        self.degraded_count = 0

    async def enrich(self, suggestions: Sequence[SpeciesSuggestion]) -> List[SpeciesSuggestion]:
        """Return suggestions in the same order, enriched where the catalog has a match."""
        return list(await asyncio.gather(*(self._enrich_one(s) for s in suggestions)))

    async def _enrich_one(self, suggestion: SpeciesSuggestion) -> SpeciesSuggestion:
        try:
            species = await asyncio.wait_for(
                self.catalog.get_by_scientific_name(suggestion.scientific_name),
                timeout=self.lookup_timeout,
            )
        except Exception as e:
            self.degraded_count += 1
            logger.warning(
                "EnrichmentDegraded",
                event_type="enrichment_degraded",
                scientific_name=suggestion.scientific_name,
                reason="timeout" if isinstance(e, asyncio.TimeoutError) else str(e),
            )
            return suggestion

        if species is None:
            return suggestion

        return suggestion.model_copy(update={
            "species_id": species.id,
            "common_name": species.common_name or suggestion.common_name,
            "care_profile": species.care_profile,
            "description": species.description,
            "image_url": species.primary_image_url,
        })
