"""
Routers package for FastAPI endpoints.

Organized by domain:
- patch_lists: Stored patch list retrieval and deletion
- upload: Tech rider upload and extraction
"""

from . import patch_lists, upload

__all__ = ["patch_lists", "upload"]
