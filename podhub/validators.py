"""
Request validation utilities for common validation patterns.
"""

from fastapi import HTTPException

MAX_SRT_UPLOAD_BYTES = 10 * 1024 * 1024


def require_field(value: str | None, name: str) -> str:
    """
    Validate that a required string field is present and non-blank.

    Raises:
        HTTPException: 400 if the value is None or blank
    """
    if not value or not value.strip():
        raise HTTPException(status_code=400, detail=f"{name} is required")
    return value.strip()


def require_upload_size(content: bytes, limit: int = MAX_SRT_UPLOAD_BYTES) -> bytes:
    """Reject uploads larger than ``limit`` bytes."""
    if len(content) > limit:
        raise HTTPException(
            status_code=400,
            detail=f"File too large (max {limit // (1024 * 1024)} MB)"
        )
    return content
