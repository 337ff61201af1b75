# 📄 File: app/shared/infrastructure/storage/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Sets up the file storage system that keeps scanned plant photos in Supabase Storage.
#
# 🧪 Purpose (Technical Summary):
# Storage infrastructure package exporting the Supabase Storage client.
#
# 🔗 Dependencies:
# - app/shared/infrastructure/storage/supabase_storage.py
#
# 🔄 Connected Modules / Calls From:
# - plant_identification service factory

from .supabase_storage import SupabaseStorageClient

__all__ = [
    "SupabaseStorageClient",
]
