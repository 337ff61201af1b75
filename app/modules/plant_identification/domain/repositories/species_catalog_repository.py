# 📄 File: app/modules/plant_identification/domain/repositories/species_catalog_repository.py
# 🧭 Purpose (Layman Explanation):
# Defines how the scanner asks our own plant encyclopedia about a species it was told about.
# 🧪 Purpose (Technical Summary):
# Repository interface for read-only lookups in the local species catalog.
# 🔗 Dependencies:
# Domain models (CatalogSpecies), typing, abc
# 🔄 Connected Modules / Calls From:
# catalog_enricher.py, SQLAlchemy implementation in infrastructure/database

from abc import ABC, abstractmethod
from typing import Optional

from ..models.identification import CatalogSpecies


class SpeciesCatalogRepository(ABC):
    """
    Repository interface for the species catalog.

    Implementation Notes:
    - Concrete implementations are in infrastructure layer
    - Methods return domain entities (CatalogSpecies), not database models
    """

    @abstractmethod
    async def get_by_scientific_name(self, scientific_name: str) -> Optional[CatalogSpecies]:
        """
        Find a catalog entry by exact scientific name.

        Returns:
            CatalogSpecies if found, None otherwise

        Raises:
            RepositoryError: If database operation fails
        """
        pass
