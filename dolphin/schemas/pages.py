"""
Pydantic schemas for the page generation API.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class PageType(str, Enum):
    """Available page templates."""
    STATIC = "static"
    DASHBOARD = "dashboard"
    FEED = "feed"


class PatchStatus(str, Enum):
    """Outcome of patching one collaborator file."""
    CREATED = "created"
    PATCHED = "patched"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


# =============================================================================
# Request Schemas
# =============================================================================

class PageRequest(BaseModel):
    """Request body for POST /pages and POST /pages/preview."""
    name: str = Field(
        ...,
        description="Kebab-case page name (e.g., 'user-profile')",
        min_length=1,
        max_length=64,
    )
    type: PageType = Field(
        default=PageType.STATIC,
        description="Page type: 'static', 'dashboard', or 'feed'",
    )
    schemas: Optional[str] = Field(
        default=None,
        description="Type-schema file, relative to the project root",
        max_length=500,
    )
    routes: Optional[str] = Field(
        default=None,
        description="Server route file, relative to the project root",
        max_length=500,
    )
    user_shard: Optional[str] = Field(
        default=None,
        description="User shard class file, relative to the project root",
        max_length=500,
    )

    @field_validator("schemas", "routes", "user_shard")
    @classmethod
    def validate_relative_path(cls, v: Optional[str]) -> Optional[str]:
        """Only project-relative paths without parent traversal."""
        if v is None:
            return None
        v = v.strip()
        if v.startswith("/") or ".." in v.split("/"):
            raise ValueError("Path must be relative to the project root")
        return v


# =============================================================================
# Response Schemas
# =============================================================================

class GeneratedFileInfo(BaseModel):
    """A file written (or planned) by a run."""
    path: str
    size: int
    content: Optional[str] = None


class PatchInfo(BaseModel):
    """One collaborator patch."""
    path: str
    status: PatchStatus
    anchor: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    unified_diff: Optional[str] = None


class PageResponse(BaseModel):
    """Response for POST /pages and POST /pages/preview."""
    name: str
    type: PageType
    dry_run: bool
    files: List[GeneratedFileInfo]
    patches: List[PatchInfo]
    manual_steps: List[str] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list)
    unified_diff: Optional[str] = None
