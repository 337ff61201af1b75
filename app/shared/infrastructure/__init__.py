"""
Infrastructure layer package for the Plant Scanner application.
Provides the database connection manager and Supabase Storage client.
"""

__all__ = []
