# 📄 File: app/api/v1/__init__.py
# 🧭 Purpose (Layman Explanation):
# Version 1 of the plant scanner's web API, kept separate so later versions do not break existing apps.
# 🧪 Purpose (Technical Summary):
# API v1 package: version metadata, route prefixes and OpenAPI tags shared by the v1 router.
# 🔗 Dependencies:
# None
# 🔄 Connected Modules / Calls From:
# app.api.v1.router, app.main.py

from typing import Any, Dict

__version__ = "1.0.0"
__api_version__ = "v1"

ROUTE_PREFIXES = {
    "identification": "/identify",
}

API_TAGS = {
    "health": "Health Check",
    "identification": "Plant Identification",
}


def get_api_info() -> Dict[str, Any]:
    """API v1 metadata for the info endpoint."""
    return {
        "version": __version__,
        "api_version": __api_version__,
        "endpoints": {
            "identify": f"/api/v1{ROUTE_PREFIXES['identification']}",
            "identify_upload": f"/api/v1{ROUTE_PREFIXES['identification']}/upload",
            "identify_retry": f"/api/v1{ROUTE_PREFIXES['identification']}/retry",
            "identify_cache": f"/api/v1{ROUTE_PREFIXES['identification']}/cache",
            "identify_stats": f"/api/v1{ROUTE_PREFIXES['identification']}/stats",
            "health": "/api/v1/health",
        },
    }
