# 📄 File: app/api/middleware/__init__.py
# 🧭 Purpose (Layman Explanation):
# The checkpoint every request passes through before it reaches the plant scanner.
# 🧪 Purpose (Technical Summary):
# HTTP middleware package; currently request logging with request-id correlation.
# 🔗 Dependencies:
# logging.py
# 🔄 Connected Modules / Calls From:
# app.main.py

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
