# 📄 File: app/api/__init__.py
# 🧭 Purpose (Layman Explanation):
# The table of contents for the plant scanner's web API.
# 🧪 Purpose (Technical Summary):
# API layer package: versioned routers and HTTP middleware.
# 🔗 Dependencies:
# None (package initialization)
# 🔄 Connected Modules / Calls From:
# app.main.py

"""
Structure:
    api/
    ├── middleware/          # Request logging
    └── v1/
        ├── router.py        # Main v1 router
        └── health.py        # Health check endpoints
"""

API_PREFIX = "/api"
CURRENT_VERSION = "v1"
