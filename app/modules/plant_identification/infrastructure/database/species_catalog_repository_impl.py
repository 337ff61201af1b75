# 📄 File: app/modules/plant_identification/infrastructure/database/species_catalog_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Looks up a plant in our own encyclopedia by its scientific name.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy implementation of SpeciesCatalogRepository with model-to-domain mapping.
#
# 🔗 Dependencies:
# - SQLAlchemy async sessions
# - PlantSpeciesModel, CatalogSpecies
#
# 🔄 Connected Modules / Calls From:
# - catalog_enricher.py (through the repository interface)
# - service_factory.py (construction)

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.core.exceptions import RepositoryError

from ...domain.models.identification import CatalogSpecies
from ...domain.repositories.species_catalog_repository import SpeciesCatalogRepository
from .models import PlantSpeciesModel

logger = logging.getLogger(__name__)


class SpeciesCatalogRepositoryImpl(SpeciesCatalogRepository):
    """SQLAlchemy implementation of the SpeciesCatalogRepository interface."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_by_scientific_name(self, scientific_name: str) -> Optional[CatalogSpecies]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(PlantSpeciesModel).where(PlantSpeciesModel.scientific_name == scientific_name)
                )
                model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Database error during species lookup for {scientific_name}: {e}")
            raise RepositoryError(
                f"Failed to look up species: {e}", operation="select", table="plant_species"
            ) from e

        return self._model_to_domain(model) if model else None

    def _model_to_domain(self, model: PlantSpeciesModel) -> CatalogSpecies:
        return CatalogSpecies(
            id=str(model.id),
            scientific_name=model.scientific_name,
            common_name=model.common_name,
            care_profile=model.care_profile,
            description=model.description,
            image_urls=list(model.image_urls or []),
        )
