# 📄 File: app/modules/plant_identification/domain/repositories/scan_record_repository.py
# 🧭 Purpose (Layman Explanation):
# Defines how each plant scan gets written into the user's scan history.
# 🧪 Purpose (Technical Summary):
# Repository interface for the append-only scan record store.
# 🔗 Dependencies:
# Domain models (ScanRecord), typing, abc
# 🔄 Connected Modules / Calls From:
# scan_recorder.py, SQLAlchemy implementation in infrastructure/database

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.identification import ScanRecord


class ScanRecordRepository(ABC):
    """Repository interface for scan records. Records are never updated."""

    @abstractmethod
    async def create(self, record: ScanRecord) -> ScanRecord:
        """
        Persist a new scan record.

        Raises:
            RepositoryError: If database operation fails
        """
        pass

    @abstractmethod
    async def get_by_id(self, scan_id: str) -> Optional[ScanRecord]:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str, limit: int = 20) -> List[ScanRecord]:
        """Most recent scans first."""
        pass
