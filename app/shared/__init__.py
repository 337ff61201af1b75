# 📄 File: app/shared/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Marks the 'shared' folder as a Python package containing common tools that every part
# of the plant scanner uses, like settings, error types, logging and database connections.
#
# 🧪 Purpose (Technical Summary):
# Shared kernel package for configuration, exception hierarchy, structured logging
# and infrastructure (database, object storage).
#
# 🔗 Dependencies:
# - Python packaging system
#
# 🔄 Connected Modules / Calls From:
# - app.main, app.api, app.modules.plant_identification

__all__ = []
