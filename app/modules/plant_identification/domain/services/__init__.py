# 📄 File: app/modules/plant_identification/domain/services/__init__.py
# 🧭 Purpose (Layman Explanation):
# Gathers the steps of a plant scan: judging confidence, adding encyclopedia notes, saving history, and running the whole scan.
# 🧪 Purpose (Technical Summary):
# Re-exports domain services of the identification pipeline.
# 🔗 Dependencies:
# confidence_gate.py, catalog_enricher.py, scan_recorder.py, identification_service.py
# 🔄 Connected Modules / Calls From:
# service_factory.py, presentation layer

from .catalog_enricher import CatalogEnricher
from .confidence_gate import ConfidenceGate, rank_suggestions
from .identification_service import IdentificationService
from .scan_recorder import ScanRecorder

__all__ = [
    "CatalogEnricher",
    "ConfidenceGate",
    "IdentificationService",
    "ScanRecorder",
    "rank_suggestions",
]
