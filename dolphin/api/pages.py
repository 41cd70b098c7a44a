"""
Page generation API routes.

Endpoints:
- POST /pages/preview - Plan a page and return files + unified diffs (nothing written)
- POST /pages - Generate a page and patch collaborator files
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from dolphin.core.config import ProjectConfig, get_project_config
from dolphin.core.errors import CollisionError, ValidationError
from dolphin.core.generator import GenerationResult, generate_page
from dolphin.schemas.pages import (
    GeneratedFileInfo,
    PageRequest,
    PageResponse,
    PatchInfo,
    PatchStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pages", tags=["pages"])


def get_config() -> ProjectConfig:
    """Project configuration (overridable in tests)."""
    return get_project_config()


def _to_response(request: PageRequest, result: GenerationResult) -> PageResponse:
    return PageResponse(
        name=result.name,
        type=request.type,
        dry_run=result.dry_run,
        files=[
            GeneratedFileInfo(
                path=f.path,
                size=f.size,
                content=f.content if result.dry_run else None,
            )
            for f in result.files
        ],
        patches=[
            PatchInfo(
                path=p.path,
                status=PatchStatus(p.status),
                anchor=p.anchor,
                warnings=[str(w) for w in p.warnings],
                unified_diff=p.diff or None,
            )
            for p in result.patches
        ],
        manual_steps=result.manual_steps,
        next_steps=result.next_steps,
        unified_diff=result.diff() if result.dry_run else None,
    )


def _generate(request: PageRequest, config: ProjectConfig, dry_run: bool) -> PageResponse:
    config = config.with_overrides(
        routes_file=request.routes,
        schemas_file=request.schemas,
        user_shard_file=request.user_shard,
    )
    try:
        result = generate_page(request.name, request.type.value, config, dry_run=dry_run)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except CollisionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except OSError as e:
        logger.error(f"page_generation_io_error page={request.name} error={e}")
        raise HTTPException(status_code=500, detail=f"Failed to write files: {e}")
    except UnicodeDecodeError as e:
        logger.error(f"page_generation_decode_error page={request.name} error={e}")
        raise HTTPException(status_code=500, detail=f"Could not read a project file as UTF-8: {e}")
    return _to_response(request, result)


@router.post("/preview", response_model=PageResponse)
def preview_page(request: PageRequest, config: ProjectConfig = Depends(get_config)) -> PageResponse:
    """
    Plan a page without touching the project.

    Returns every file that would be created and a unified diff of every
    collaborator file that would be patched.
    """
    return _generate(request, config, dry_run=True)


@router.post("", response_model=PageResponse, status_code=201)
def create_page(request: PageRequest, config: ProjectConfig = Depends(get_config)) -> PageResponse:
    """Generate a page and wire it into the project."""
    return _generate(request, config, dry_run=False)
