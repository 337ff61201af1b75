# 📄 File: app/modules/plant_identification/domain/__init__.py
# 🧭 Purpose (Layman Explanation):
# The rules of a plant scan: what a good answer looks like and the order the steps happen in.
# 🧪 Purpose (Technical Summary):
# Domain layer of the identification module: models, repository interfaces and services.
# 🔗 Dependencies:
# models, repositories, services subpackages
# 🔄 Connected Modules / Calls From:
# Infrastructure layer, presentation layer

"""
Plant Identification Domain Layer

Domain Models:
- NormalizedImage, RawSuggestion, SpeciesSuggestion, IdentificationResult, ScanRecord

Domain Services:
- IdentificationService: Pipeline orchestration
- ConfidenceGate, CatalogEnricher, ScanRecorder

Repository Interfaces:
- SpeciesCatalogRepository, ScanRecordRepository
"""
