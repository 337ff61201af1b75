# 📄 File: app/modules/plant_identification/domain/services/identification_service.py
# 🧭 Purpose (Layman Explanation):
# The conductor of a plant scan: cleans up the photo, checks whether we already know the answer,
# asks the recognition service, decides whether the answer is sure enough, adds our own plant notes,
# saves the photo and the scan, and hands the result back.
# 🧪 Purpose (Technical Summary):
# Identification orchestrator composing normalizer, result cache, classifier client, confidence gate,
# catalog enricher, image storage and scan recorder. Owns the pipeline state transitions, cancellation
# checkpoints, outcome counters and component lifecycle.
# 🔗 Dependencies:
# asyncio, domain services, infrastructure adapters (injected), structured logging
# 🔄 Connected Modules / Calls From:
# service_factory.py (construction), presentation/api/v1/identification.py, app.main lifespan

import asyncio
import time
from typing import Any, Dict, Optional

from app.shared.core.exceptions import (
    ClassificationUnavailableError,
    ClientRequestError,
    IdentificationCancelledError,
)
from app.shared.utils.logging import get_logger

from ..models.identification import (
    CacheEntry,
    IdentificationResponse,
    IdentificationResult,
    NormalizedImage,
)
from .catalog_enricher import CatalogEnricher
from .confidence_gate import ConfidenceGate
from .scan_recorder import ScanRecorder

logger = get_logger(__name__)

LOW_CONFIDENCE_MESSAGE = (
    "Low confidence identification. Please retake the photo or search manually."
)


class IdentificationService:
    """
    Plant identification pipeline.

    States: Normalizing -> CacheCheck -> (hit: Done) | (miss: Classifying -> Gating
    -> [Enriching] -> Recording -> CacheStoring -> Done). Any raised error is Failed.

    Collaborators are injected; the normalizer, classifier, cache and storage are
    duck-typed adapters from the infrastructure layer.
    """

    def __init__(
        self,
        normalizer,
        classifier,
        cache,
        gate: ConfidenceGate,
        enricher: CatalogEnricher,
        recorder: ScanRecorder,
        image_storage=None,
        cache_ttl: int = 300,
        low_confidence_ttl: int = 60,
        storage_timeout: float = 10.0,
    ):
        self.normalizer = normalizer
        self.classifier = classifier
        self.cache = cache
        self.gate = gate
        self.enricher = enricher
        self.recorder = recorder
        self.image_storage = image_storage
        self.cache_ttl = cache_ttl
        self.low_confidence_ttl = low_confidence_ttl
        self.storage_timeout = storage_timeout

        self.outcomes = {
            "requests": 0,
            "cache_hits": 0,
            "accepted": 0,
            "rejected": 0,
            "invalid_images": 0,
            "classifier_failures": 0,
            "cancelled": 0,
            "storage_failures": 0,
            "cache_failures": 0,
        }

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def startup(self) -> None:
        """Open HTTP sessions and the storage client."""
        await self.normalizer.initialize()
        await self.classifier.initialize()

        if self.image_storage is not None:
            try:
                await self.image_storage.initialize()
            except Exception as e:
                logger.warning(f"Image storage disabled: {e}")
                self.image_storage = None

        logger.info("Identification service started", storage_enabled=self.image_storage is not None)

    async def shutdown(self) -> None:
        """Close HTTP sessions and the cache connection."""
        await self.classifier.close()
        await self.normalizer.close()
        await self.cache.close()
        logger.info("Identification service stopped")

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def identify(
        self,
        image,
        user_id: Optional[str] = None,
        organ: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> IdentificationResponse:
        """
        Identify the plant in an image.

        Args:
            image: Raw bytes, a base64 image data URI, or an http(s) URL
            user_id: Owner of the scan, None for anonymous scans
            organ: Classifier organ hint, defaults to the configured organ
            cancel_event: Set it to abandon the identification

        Returns:
            IdentificationResponse, success=False with data for low confidence

        Raises:
            InvalidImageError: Image could not be normalized
            ClassificationUnavailableError: Classifier failed or refused the request
            IdentificationCancelledError: cancel_event was set
        """
        normalized = await self._normalize(image, cancel_event)
        return await self._identify_normalized(normalized, user_id, organ, cancel_event)

    async def retry_identification(
        self,
        image,
        user_id: Optional[str] = None,
        organ: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> IdentificationResponse:
        """Drop any cached result for the image and identify it again."""
        normalized = await self._normalize(image, cancel_event)
        await self._cache_delete(normalized.cache_key)
        logger.info("Retrying identification", fingerprint=normalized.fingerprint[:12], user_id=user_id)
        return await self._identify_normalized(normalized, user_id, organ, cancel_event)

    async def clear_cache(self, image) -> bool:
        """Drop the cached result for an image. Returns True if one existed."""
        normalized = await self.normalizer.normalize(image)
        removed = await self._cache_delete(normalized.cache_key)
        logger.info("Cached identification cleared", fingerprint=normalized.fingerprint[:12], removed=removed)
        return removed

    async def get_stats(self) -> Dict[str, Any]:
        """Pipeline counters for monitoring."""
        return {
            "outcomes": dict(self.outcomes),
            "cache": await self.cache.stats(),
            "classifier": self.classifier.get_stats(),
            "enrichment_degraded": self.enricher.degraded_count,
            "persistence_failures": self.recorder.failure_count,
        }

    # =========================================================================
    # PIPELINE
    # =========================================================================

    async def _normalize(self, image, cancel_event: Optional[asyncio.Event]) -> NormalizedImage:
        self.outcomes["requests"] += 1
        try:
            normalized = await self.normalizer.normalize(image)
        except Exception:
            self.outcomes["invalid_images"] += 1
            raise
        self._checkpoint(cancel_event, "normalizing")
        return normalized

    async def _identify_normalized(
        self,
        normalized: NormalizedImage,
        user_id: Optional[str],
        organ: Optional[str],
        cancel_event: Optional[asyncio.Event],
    ) -> IdentificationResponse:
        started = time.monotonic()
        key = normalized.cache_key

        entry = await self._cache_get(key)
        if entry is not None:
            self.outcomes["cache_hits"] += 1
            logger.info("Identification served from cache", fingerprint=normalized.fingerprint[:12])
            return self._to_response(entry.result)

        raw_suggestions = await self._classify(normalized, organ, cancel_event)

        gate_result = self.gate.gate(raw_suggestions)
        suggestions = gate_result.suggestions
        if gate_result.accepted:
            suggestions = await self.enricher.enrich(suggestions)

        self._checkpoint(cancel_event, "storing")

        image_url = normalized.source_url
        if suggestions:
            image_url = await self._store_image(normalized, user_id) or image_url

        self._checkpoint(cancel_event, "recording")

        result = IdentificationResult(
            top_suggestion=suggestions[0] if suggestions else None,
            all_suggestions=suggestions,
            image_url=image_url,
            threshold_met=gate_result.accepted,
            confidence=gate_result.best_confidence,
            fingerprint=normalized.fingerprint,
        )

        scan_id = await self.recorder.record(result, user_id=user_id)
        if scan_id is not None:
            result = result.model_copy(update={"scan_id": scan_id})

        self._checkpoint(cancel_event, "caching")
        ttl = self.cache_ttl if gate_result.accepted else self.low_confidence_ttl
        await self._cache_set(key, result, ttl)

        self.outcomes["accepted" if gate_result.accepted else "rejected"] += 1
        logger.log_business_event(
            "plant_identified" if gate_result.accepted else "plant_identification_low_confidence",
            f"Identification finished: {result.top_suggestion.scientific_name if result.top_suggestion else 'no match'}",
            entity_id=result.scan_id,
            entity_type="scan",
            extra={
                "user_id": user_id,
                "confidence": result.confidence,
                "threshold_met": result.threshold_met,
                "suggestion_count": len(result.all_suggestions),
                "duration_ms": round((time.monotonic() - started) * 1000, 2),
            },
        )
        return self._to_response(result)

    async def _classify(self, normalized: NormalizedImage, organ, cancel_event):
        try:
            return await self.classifier.classify(normalized.data, organ=organ, cancel_event=cancel_event)
        except IdentificationCancelledError:
            self.outcomes["cancelled"] += 1
            raise
        except ClientRequestError as e:
            self.outcomes["classifier_failures"] += 1
            raise ClassificationUnavailableError(
                message="Plant identification request was rejected",
                attempts=1,
                last_error=e,
                retryable=False,
            ) from e
        except ClassificationUnavailableError:
            self.outcomes["classifier_failures"] += 1
            raise

    async def _store_image(self, normalized: NormalizedImage, user_id: Optional[str]) -> Optional[str]:
        if self.image_storage is None:
            return None
        try:
            return await asyncio.wait_for(
                self.image_storage.upload_scan_image(
                    normalized.data, normalized.fingerprint, user_id=user_id
                ),
                timeout=self.storage_timeout,
            )
        except Exception as e:
            self.outcomes["storage_failures"] += 1
            logger.warning(
                "StorageUploadFailed",
                event_type="storage_upload_failed",
                fingerprint=normalized.fingerprint[:12],
                reason="timeout" if isinstance(e, asyncio.TimeoutError) else str(e),
            )
            return None

    async def _cache_get(self, key: str) -> Optional[CacheEntry]:
        try:
            return await self.cache.get(key)
        except Exception as e:
            self._cache_degraded("get", key, e)
            return None

    async def _cache_set(self, key: str, result: IdentificationResult, ttl: int) -> None:
        try:
            await self.cache.set(key, result, ttl)
        except Exception as e:
            self._cache_degraded("set", key, e)

    async def _cache_delete(self, key: str) -> bool:
        try:
            return await self.cache.delete(key)
        except Exception as e:
            self._cache_degraded("delete", key, e)
            return False

    def _cache_degraded(self, operation: str, key: str, error: Exception) -> None:
        self.outcomes["cache_failures"] += 1
        logger.warning(
            "CacheDegraded",
            event_type="cache_degraded",
            operation=operation,
            key=key,
            reason=str(error),
        )

    def _checkpoint(self, cancel_event: Optional[asyncio.Event], stage: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self.outcomes["cancelled"] += 1
            raise IdentificationCancelledError(stage=stage)

    @staticmethod
    def _to_response(result: IdentificationResult) -> IdentificationResponse:
        if result.threshold_met:
            return IdentificationResponse(success=True, data=result)
        return IdentificationResponse(
            success=False,
            data=result,
            error=LOW_CONFIDENCE_MESSAGE,
            error_code="LOW_CONFIDENCE",
        )
