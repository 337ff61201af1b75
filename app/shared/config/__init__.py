# 📄 File: app/shared/config/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Contains the settings that tell the plant scanner how to reach its database,
# cache, storage and identification service, and how to adjust its behavior.
#
# 🧪 Purpose (Technical Summary):
# Configuration package initialization exporting the settings model and factory.
#
# 🔗 Dependencies:
# - settings.py (application settings)
#
# 🔄 Connected Modules / Calls From:
# - app.main (application startup)
# - All modules requiring configuration

from .settings import get_settings, Settings

__all__ = [
    "get_settings",
    "Settings",
]
