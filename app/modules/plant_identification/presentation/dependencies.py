# 📄 File: app/modules/plant_identification/presentation/dependencies.py
# 🧭 Purpose (Layman Explanation):
# Hands each plant scan request the single shared plant scanner that was built when the server started.
# 🧪 Purpose (Technical Summary):
# FastAPI dependency resolving the IdentificationService held on app.state by the lifespan handler.
# 🔗 Dependencies:
# FastAPI, IdentificationService
# 🔄 Connected Modules / Calls From:
# presentation/api/v1/identification.py

from fastapi import HTTPException, Request, status

from ..domain.services.identification_service import IdentificationService


def get_identification_service(request: Request) -> IdentificationService:
    """Resolve the process-wide identification service."""
    service = getattr(request.app.state, "identification_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identification service is not initialized",
        )
    return service
