# 📄 File: app/modules/plant_identification/infrastructure/service_factory.py
# 🧭 Purpose (Layman Explanation):
# Puts the plant scanner together from its parts (photo cleaner, memory, recognition service,
# encyclopedia, history, photo storage) using the app's settings.
# 🧪 Purpose (Technical Summary):
# Composition root for IdentificationService. Chooses the cache backend, wires SQLAlchemy repositories
# to the shared session factory and enables Supabase Storage when credentials are configured.
# 🔗 Dependencies:
# app.shared.config.settings, infrastructure adapters, domain services
# 🔄 Connected Modules / Calls From:
# app.main lifespan (once per process)

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.config.settings import Settings
from app.shared.infrastructure.storage.supabase_storage import SupabaseStorageClient
from app.shared.utils.logging import get_logger

from ..domain.services.catalog_enricher import CatalogEnricher
from ..domain.services.confidence_gate import ConfidenceGate
from ..domain.services.identification_service import IdentificationService
from ..domain.services.scan_recorder import ScanRecorder
from .cache.result_cache import InMemoryResultCache, RedisResultCache, ResultCache
from .database.scan_record_repository_impl import ScanRecordRepositoryImpl
from .database.species_catalog_repository_impl import SpeciesCatalogRepositoryImpl
from .external.plantnet_client import PlantNetClient
from .image.image_normalizer import ImageNormalizer

logger = get_logger(__name__)


def create_result_cache(settings: Settings) -> ResultCache:
    """Build the configured cache backend."""
    if settings.IDENTIFICATION_CACHE_BACKEND == "redis":
        return RedisResultCache.from_url(
            settings.REDIS_URL, max_entries=settings.IDENTIFICATION_CACHE_MAX_ENTRIES
        )
    return InMemoryResultCache(max_entries=settings.IDENTIFICATION_CACHE_MAX_ENTRIES)


def create_identification_service(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    cache: Optional[ResultCache] = None,
    classifier: Optional[PlantNetClient] = None,
    image_storage: Optional[SupabaseStorageClient] = None,
) -> IdentificationService:
    """
    Build the identification pipeline from settings.

    Explicit collaborators override the ones derived from settings.
    """
    if image_storage is None and settings.storage_enabled:
        image_storage = SupabaseStorageClient(settings)

    service = IdentificationService(
        normalizer=ImageNormalizer(
            max_dimension=settings.IMAGE_MAX_DIMENSION,
            quality=settings.IMAGE_QUALITY,
            max_bytes=settings.MAX_IMAGE_SIZE,
            fetch_timeout=settings.IMAGE_FETCH_TIMEOUT,
        ),
        classifier=classifier or PlantNetClient.from_settings(settings),
        cache=cache or create_result_cache(settings),
        gate=ConfidenceGate(
            threshold=settings.IDENTIFICATION_CONFIDENCE_THRESHOLD,
            max_suggestions=settings.IDENTIFICATION_MAX_SUGGESTIONS,
        ),
        enricher=CatalogEnricher(
            SpeciesCatalogRepositoryImpl(session_factory),
            lookup_timeout=settings.CATALOG_LOOKUP_TIMEOUT,
        ),
        recorder=ScanRecorder(
            ScanRecordRepositoryImpl(session_factory),
            write_timeout=settings.SCAN_RECORD_TIMEOUT,
        ),
        image_storage=image_storage,
        cache_ttl=settings.IDENTIFICATION_CACHE_TTL,
        low_confidence_ttl=settings.IDENTIFICATION_LOW_CONFIDENCE_TTL,
        storage_timeout=settings.STORAGE_UPLOAD_TIMEOUT,
    )

    logger.info(
        "Identification service configured",
        cache_backend=settings.IDENTIFICATION_CACHE_BACKEND,
        storage_enabled=image_storage is not None,
        threshold=settings.IDENTIFICATION_CONFIDENCE_THRESHOLD,
    )
    return service
