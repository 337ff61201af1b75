# 📄 File: app/modules/plant_identification/domain/services/scan_recorder.py
# 🧭 Purpose (Layman Explanation):
# Writes each finished scan into the history. If the history is unavailable the user still gets their answer.
# 🧪 Purpose (Technical Summary):
# Best-effort persistence of immutable scan records with a bounded write; failures are logged and swallowed.
# 🔗 Dependencies:
# asyncio, ScanRecordRepository, structured logging
# 🔄 Connected Modules / Calls From:
# identification_service.py

import asyncio
from typing import Optional

from app.shared.utils.logging import get_logger

from ..models.identification import IdentificationResult, ScanRecord
from ..repositories.scan_record_repository import ScanRecordRepository

logger = get_logger(__name__)


class ScanRecorder:
    """Persists one record per completed identification that has suggestions."""

    def __init__(self, repository: ScanRecordRepository, write_timeout: float = 3.0):
        self.repository = repository
        self.write_timeout = write_timeout
        self.failure_count = 0

    async def record(self, result: IdentificationResult, user_id: Optional[str] = None) -> Optional[str]:
        """Return the new scan id, or None when nothing was written."""
        if not result.all_suggestions:
            return None

        record = ScanRecord.from_result(result, user_id=user_id)
        try:
            saved = await asyncio.wait_for(self.repository.create(record), timeout=self.write_timeout)
        except Exception as e:
            self.failure_count += 1
            logger.error(
                "PersistenceFailure",
                event_type="persistence_failure",
                scan_id=record.scan_id,
                user_id=user_id,
                reason="timeout" if isinstance(e, asyncio.TimeoutError) else str(e),
            )
            return None

        return saved.scan_id
