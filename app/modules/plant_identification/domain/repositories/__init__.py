# 📄 File: app/modules/plant_identification/domain/repositories/__init__.py
# 🧭 Purpose (Layman Explanation):
# Lists the storage contracts the plant scanner relies on.
# 🧪 Purpose (Technical Summary):
# Re-exports repository interfaces for the species catalog and scan records.
# 🔗 Dependencies:
# species_catalog_repository.py, scan_record_repository.py
# 🔄 Connected Modules / Calls From:
# Domain services, infrastructure implementations

from .scan_record_repository import ScanRecordRepository
from .species_catalog_repository import SpeciesCatalogRepository

__all__ = [
    "ScanRecordRepository",
    "SpeciesCatalogRepository",
]
