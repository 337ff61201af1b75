# 📄 File: app/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Tells Python this 'app' folder holds the plant scanner service and records its version.
#
# 🧪 Purpose (Technical Summary):
# Application package initialization with version metadata.
#
# 🔗 Dependencies:
# None
#
# 🔄 Connected Modules / Calls From:
# main.py, packaging

"""
Plant Scanner API

Identifies plants from photos: image normalization, species classification with retries,
confidence gating, local catalog enrichment and scan history.
"""

__version__ = "1.0.0"
__title__ = "Plant Scanner API"

__all__ = [
    "__version__",
    "__title__",
]
