"""SQLAlchemy models and repository implementations for plant identification."""

from .models import PlantSpeciesModel, ScanRecordModel
from .scan_record_repository_impl import ScanRecordRepositoryImpl
from .species_catalog_repository_impl import SpeciesCatalogRepositoryImpl

__all__ = [
    "PlantSpeciesModel",
    "ScanRecordModel",
    "ScanRecordRepositoryImpl",
    "SpeciesCatalogRepositoryImpl",
]
