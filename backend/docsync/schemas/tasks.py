"""
Schemas for Celery task responses and status.

This module provides two types of schemas:
1. Pydantic models for API response validation
2. TypedDict for Celery task return type hints (static type checking)
"""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict

from pydantic import BaseModel, Field


# =============================================================================
# Pydantic Models (for API responses)
# =============================================================================


class TaskProgressInfo(BaseModel):
    """Progress information for a running task."""

    current: int = Field(ge=0)
    total: int = Field(ge=0)
    percent: float = Field(ge=0.0, le=100.0)
    message: str = ""


class TaskStatusResponse(BaseModel):
    """Response for task status endpoint."""

    task_id: str
    state: str
    status: str  # Alias for state
    ready: bool = False
    successful: bool | None = None
    failed: bool | None = None
    result: dict[str, Any] | None = None
    error: str | None = None
    progress: TaskProgressInfo | None = None


# =============================================================================
# TypedDict (for Celery task return types - static type checking)
# =============================================================================


class SyncReportDict(TypedDict):
    """Return type for the sync_documentation task."""

    status: str
    source: str
    forced: bool
    changed_paths: list[str]
    unchanged_count: int
    failed_paths: list[str]
    failed_folders: list[str]
    error: NotRequired[str]


class ServiceHealthDict(TypedDict):
    """Individual service health status."""

    database: bool
    redis: bool


class HealthCheckResultDict(TypedDict):
    """Return type for health_check task."""

    healthy: bool
    services: ServiceHealthDict
