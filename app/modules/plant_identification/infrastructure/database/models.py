# 📄 File: app/modules/plant_identification/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# This file defines how our plant encyclopedia and the history of plant scans are stored in the database.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM models for the species catalog (plant_species) and the append-only
# scan history (scan_records). Portable column types so the same models run on PostgreSQL and SQLite.
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - app.shared.infrastructure.database.connection (shared Base)
#
# 🔄 Connected Modules / Calls From:
# - species_catalog_repository_impl.py and scan_record_repository_impl.py
# - migrations/versions (schema)

from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, String, Text, func

from app.shared.infrastructure.database.connection import Base


class PlantSpeciesModel(Base):
    """
    Local species catalog entry.

    Read-only from the identification pipeline's point of view; joined to
    classifier suggestions by exact scientific name.
    """
    __tablename__ = "plant_species"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
        comment="Unique species identifier"
    )
    scientific_name = Column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Binomial name without author"
    )
    common_name = Column(String(255), nullable=True, comment="Preferred local common name")
    care_profile = Column(JSON, nullable=True, comment="Watering, light and soil guidance")
    description = Column(Text, nullable=True)
    image_urls = Column(JSON, nullable=True, comment="Reference photos, first one is primary")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<PlantSpeciesModel(id={self.id}, scientific_name={self.scientific_name})>"


class ScanRecordModel(Base):
    """One completed identification. Rows are inserted, never updated."""
    __tablename__ = "scan_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()), comment="Scan identifier")
    user_id = Column(String(64), nullable=True, index=True, comment="Owner, NULL for anonymous scans")
    image_url = Column(Text, nullable=True)
    image_fingerprint = Column(String(64), nullable=True, index=True, comment="SHA-256 of normalized image")
    result_species_id = Column(String(36), nullable=True)
    result_species_name = Column(String(255), nullable=True)
    confidence = Column(Float, nullable=False, default=0.0)
    threshold_met = Column(Boolean, nullable=False, default=False)
    suggested_species = Column(JSON, nullable=False, default=list, comment="Ranked suggestions as returned")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<ScanRecordModel(id={self.id}, user_id={self.user_id}, species={self.result_species_name})>"
