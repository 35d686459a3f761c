"""
Pydantic models for cache entries and client configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """Last revalidation response for one license ID."""

    text: str
    timestamp: float = Field(ge=0)


class CacheFile(BaseModel):
    entries: dict[str, CacheEntry] = Field(default_factory=dict)


class ClientConfig(BaseModel):
    verification_url: str | None = None
    license_file: str | None = None
    cache_file_path: Path | None = None
    request_timeout: float | None = None
    log_level: int | None = None
