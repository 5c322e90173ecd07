from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """A documentation page as the services see it, detached from the ORM."""

    model_config = ConfigDict(from_attributes=True)

    path: str = Field(..., min_length=1, max_length=500)
    title: str
    description: str | None = None
    content_raw: str
    content_html: str
    content_hash: str | None = None
    order: int = 0
    updated_at: datetime | None = None


class DocumentPage(BaseModel):

    path: str
    title: str
    description: str | None = None
    html: str
    edit_url: str


class NavigationItem(BaseModel):

    title: str
    path: str


class NavigationSection(BaseModel):

    title: str
    items: list[NavigationItem] = Field(default_factory=list)


class DocumentPageResponse(BaseModel):

    content: DocumentPage
    navigation: list[NavigationSection] = Field(default_factory=list)
    current_page: str


class SearchResult(BaseModel):

    model_config = ConfigDict(from_attributes=True)

    path: str
    title: str
    description: str | None = None


class SyncResponse(BaseModel):

    status: str
    source: str
    forced: bool = False
    changed_paths: list[str] = Field(default_factory=list)
    unchanged_count: int = Field(default=0, ge=0)
    failed_paths: list[str] = Field(default_factory=list)
    failed_folders: list[str] = Field(default_factory=list)
    task_id: str | None = None


class StatsResponse(BaseModel):

    documents: int = Field(ge=0)
    sections: int = Field(ge=0)
