# 📄 File: app/shared/utils/__init__.py

# 🧭 Purpose (Layman Explanation):
# This file sets up the shared helper tools, currently the structured logging
# every part of the plant scanner uses.

# 🧪 Purpose (Technical Summary):
# Initializes the utilities package and re-exports the logging helpers.

# 🔗 Dependencies:
# - logging: Structured logging utilities

# 🔄 Connected Modules / Calls From:
# Used by: All application modules

from .logging import get_logger, log_context, setup_logging

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
]
