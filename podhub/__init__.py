"""
PodHub Backend

A FastAPI backend for the PodHub podcast player.
Provides feed sync, audio caching, transcription and AI summaries.
"""

__version__ = "1.0.0"
