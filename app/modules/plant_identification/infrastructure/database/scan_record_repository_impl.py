# 📄 File: app/modules/plant_identification/infrastructure/database/scan_record_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Saves every plant scan into the user's history and reads that history back.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy implementation of ScanRecordRepository. Insert-only writes, one session per operation.
#
# 🔗 Dependencies:
# - SQLAlchemy async sessions
# - ScanRecordModel, ScanRecord
#
# 🔄 Connected Modules / Calls From:
# - scan_recorder.py (through the repository interface)
# - service_factory.py (construction)

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.core.exceptions import RepositoryError

from ...domain.models.identification import ScanRecord, SpeciesSuggestion
from ...domain.repositories.scan_record_repository import ScanRecordRepository
from .models import ScanRecordModel

logger = logging.getLogger(__name__)


class ScanRecordRepositoryImpl(ScanRecordRepository):
    """SQLAlchemy implementation of the ScanRecordRepository interface."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, record: ScanRecord) -> ScanRecord:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(self._domain_to_model(record))
        except SQLAlchemyError as e:
            logger.error(f"Database error during scan record creation: {e}")
            raise RepositoryError(
                f"Failed to create scan record: {e}", operation="insert", table="scan_records"
            ) from e

        logger.info(f"Created scan record with ID: {record.scan_id}")
        return record

    async def get_by_id(self, scan_id: str) -> Optional[ScanRecord]:
        try:
            async with self._session_factory() as session:
                model = await session.get(ScanRecordModel, scan_id)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to fetch scan record: {e}", operation="select", table="scan_records"
            ) from e

        return self._model_to_domain(model) if model else None

    async def list_for_user(self, user_id: str, limit: int = 20) -> List[ScanRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(ScanRecordModel)
                    .where(ScanRecordModel.user_id == user_id)
                    .order_by(ScanRecordModel.created_at.desc())
                    .limit(limit)
                )
                models = result.scalars().all()
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to list scan records: {e}", operation="select", table="scan_records"
            ) from e

        return [self._model_to_domain(m) for m in models]

    def _domain_to_model(self, record: ScanRecord) -> ScanRecordModel:
        return ScanRecordModel(
            id=record.scan_id,
            user_id=record.user_id,
            image_url=record.image_url,
            image_fingerprint=record.image_fingerprint,
            result_species_id=record.result_species_id,
            result_species_name=record.result_species_name,
            confidence=record.confidence,
            threshold_met=record.threshold_met,
            suggested_species=[s.model_dump(mode="json") for s in record.suggested_species],
            created_at=record.created_at,
        )

    def _model_to_domain(self, model: ScanRecordModel) -> ScanRecord:
        return ScanRecord(
            scan_id=model.id,
            user_id=model.user_id,
            image_url=model.image_url,
            image_fingerprint=model.image_fingerprint,
            result_species_id=model.result_species_id,
            result_species_name=model.result_species_name,
            confidence=model.confidence,
            threshold_met=model.threshold_met,
            suggested_species=[SpeciesSuggestion.model_validate(s) for s in model.suggested_species or []],
            created_at=model.created_at,
        )
