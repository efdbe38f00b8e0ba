"""
API route modules.
"""

from .channels import router as channels_router
from .media import router as media_router, files_router as media_files_router
from .transcription import router as transcription_router
from .summary import router as summary_router
from .misc import router as misc_router

__all__ = [
    "channels_router",
    "media_router",
    "media_files_router",
    "transcription_router",
    "summary_router",
    "misc_router",
]
