"""Tests for the confidence gate, catalog enricher and scan recorder."""
import asyncio
from typing import Dict, List, Optional

import pytest

from app.modules.plant_identification.domain.models.identification import (
    CatalogSpecies,
    IdentificationResult,
    RawSuggestion,
    ScanRecord,
    SpeciesSuggestion,
)
from app.modules.plant_identification.domain.repositories import (
    ScanRecordRepository,
    SpeciesCatalogRepository,
)
from app.modules.plant_identification.domain.services import (
    CatalogEnricher,
    ConfidenceGate,
    ScanRecorder,
)
from app.shared.core.exceptions import RepositoryError


def raw(name: str, confidence: float, common: Optional[str] = None) -> RawSuggestion:
    return RawSuggestion(scientific_name=name, confidence=confidence, common_name=common)


class StubCatalog(SpeciesCatalogRepository):
    def __init__(self, species: Dict[str, CatalogSpecies] = None, fail_on=(), slow_on=()):
        self.species = species or {}
        self.fail_on = set(fail_on)
        self.slow_on = set(slow_on)
        self.lookups: List[str] = []

    async def get_by_scientific_name(self, scientific_name: str) -> Optional[CatalogSpecies]:
        self.lookups.append(scientific_name)
        if scientific_name in self.fail_on:
            raise RepositoryError("catalog offline")
        if scientific_name in self.slow_on:
            await asyncio.sleep(5)
        return self.species.get(scientific_name)


class StubScanStore(ScanRecordRepository):
    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.fail = fail
        self.delay = delay
        self.records: List[ScanRecord] = []

    async def create(self, record: ScanRecord) -> ScanRecord:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RepositoryError("scan store offline")
        self.records.append(record)
        return record

    async def get_by_id(self, scan_id: str) -> Optional[ScanRecord]:
        return next((r for r in self.records if r.scan_id == scan_id), None)

    async def list_for_user(self, user_id: str, limit: int = 20) -> List[ScanRecord]:
        return [r for r in self.records if r.user_id == user_id][:limit]


MONSTERA = CatalogSpecies(
    id="sp-monstera",
    scientific_name="Monstera deliciosa",
    common_name="Swiss Cheese Plant",
    care_profile={"water": "weekly", "light": "bright indirect"},
    description="Climbing aroid with split leaves.",
    image_urls=["https://cdn.example/monstera-1.jpg", "https://cdn.example/monstera-2.jpg"],
)


class TestConfidenceGate:
    def test_accepts_confident_top(self):
        result = ConfidenceGate(0.5).gate([raw("Monstera deliciosa", 0.92), raw("Philodendron", 0.05)])

        assert result.accepted
        assert result.best_confidence == 0.92

    def test_rejects_low_confidence(self):
        result = ConfidenceGate(0.5).gate([raw("Blurry thing", 0.3)])

        assert not result.accepted
        assert result.best_confidence == 0.3
        assert len(result.suggestions) == 1

    def test_rejects_empty(self):
        result = ConfidenceGate(0.5).gate([])

        assert not result.accepted
        assert result.best_confidence == 0.0
        assert result.suggestions == []

    def test_threshold_is_inclusive(self):
        assert ConfidenceGate(0.5).gate([raw("Ficus lyrata", 0.5)]).accepted

    def test_ranks_descending_and_keeps_tie_order(self):
        result = ConfidenceGate(0.5).gate([
            raw("B", 0.2), raw("A", 0.6), raw("C", 0.2), raw("D", 0.9),
        ])

        assert [s.scientific_name for s in result.suggestions] == ["D", "A", "B", "C"]

    def test_truncates_to_max_suggestions(self):
        result = ConfidenceGate(0.5, max_suggestions=5).gate(
            [raw(f"Species {i}", 0.9 - i * 0.1) for i in range(8)]
        )

        assert len(result.suggestions) == 5

    def test_explicit_threshold_overrides_default(self):
        assert not ConfidenceGate(0.5).gate([raw("Ficus lyrata", 0.6)], threshold=0.7).accepted

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            ConfidenceGate(1.5)


class TestCatalogEnricher:
    async def test_hit_attaches_catalog_fields(self):
        enricher = CatalogEnricher(StubCatalog({MONSTERA.scientific_name: MONSTERA}))
        suggestion = SpeciesSuggestion(scientific_name="Monstera deliciosa", common_name="Split-leaf", confidence=0.92)

        [enriched] = await enricher.enrich([suggestion])

        assert enriched.species_id == "sp-monstera"
        assert enriched.common_name == "Swiss Cheese Plant"
        assert enriched.care_profile == {"water": "weekly", "light": "bright indirect"}
        assert enriched.image_url == "https://cdn.example/monstera-1.jpg"
        assert enriched.confidence == 0.92

    async def test_miss_keeps_classifier_name(self):
        enricher = CatalogEnricher(StubCatalog())
        suggestion = SpeciesSuggestion(scientific_name="Ficus lyrata", common_name="Fiddle-leaf fig", confidence=0.8)

        [enriched] = await enricher.enrich([suggestion])

        assert enriched == suggestion
        assert enriched.species_id is None

    async def test_lookup_error_degrades(self):
        catalog = StubCatalog({MONSTERA.scientific_name: MONSTERA}, fail_on={"Ficus lyrata"})
        enricher = CatalogEnricher(catalog)
        suggestions = [
            SpeciesSuggestion(scientific_name="Monstera deliciosa", confidence=0.9),
            SpeciesSuggestion(scientific_name="Ficus lyrata", confidence=0.1),
        ]

        enriched = await enricher.enrich(suggestions)

        assert enriched[0].species_id == "sp-monstera"
        assert enriched[1] == suggestions[1]
        assert enricher.degraded_count == 1

    async def test_lookup_timeout_degrades(self):
        enricher = CatalogEnricher(StubCatalog(slow_on={"Ficus lyrata"}), lookup_timeout=0.05)
        suggestion = SpeciesSuggestion(scientific_name="Ficus lyrata", confidence=0.8)

        [enriched] = await enricher.enrich([suggestion])

        assert enriched == suggestion
        assert enricher.degraded_count == 1

    async def test_preserves_order(self):
        enricher = CatalogEnricher(StubCatalog({MONSTERA.scientific_name: MONSTERA}))
        names = ["Ficus lyrata", "Monstera deliciosa", "Pilea peperomioides"]

        enriched = await enricher.enrich([SpeciesSuggestion(scientific_name=n, confidence=0.5) for n in names])

        assert [s.scientific_name for s in enriched] == names


def _result(suggestions) -> IdentificationResult:
    return IdentificationResult(
        top_suggestion=suggestions[0] if suggestions else None,
        all_suggestions=suggestions,
        threshold_met=True,
        confidence=suggestions[0].confidence if suggestions else 0.0,
        fingerprint="f" * 64,
    )


class TestScanRecorder:
    async def test_records_result(self):
        store = StubScanStore()
        top = SpeciesSuggestion(
            scientific_name="Monstera deliciosa", common_name="Swiss Cheese Plant",
            confidence=0.92, species_id="sp-monstera",
        )

        scan_id = await ScanRecorder(store).record(_result([top]), user_id="u1")

        [record] = store.records
        assert scan_id == record.scan_id
        assert record.user_id == "u1"
        assert record.result_species_id == "sp-monstera"
        assert record.result_species_name == "Monstera deliciosa"
        assert record.suggested_species == [top]

    async def test_anonymous_scan(self):
        store = StubScanStore()
        top = SpeciesSuggestion(scientific_name="Ficus lyrata", confidence=0.7)

        await ScanRecorder(store).record(_result([top]))

        assert store.records[0].user_id is None

    async def test_nothing_recorded_without_suggestions(self):
        store = StubScanStore()

        assert await ScanRecorder(store).record(_result([])) is None
        assert store.records == []

    async def test_failure_is_swallowed(self):
        recorder = ScanRecorder(StubScanStore(fail=True))
        top = SpeciesSuggestion(scientific_name="Ficus lyrata", confidence=0.7)

        assert await recorder.record(_result([top])) is None
        assert recorder.failure_count == 1

    async def test_timeout_is_swallowed(self):
        recorder = ScanRecorder(StubScanStore(delay=1.0), write_timeout=0.05)
        top = SpeciesSuggestion(scientific_name="Ficus lyrata", confidence=0.7)

        assert await recorder.record(_result([top])) is None
        assert recorder.failure_count == 1
