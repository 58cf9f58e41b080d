from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from regview.core.auth import get_current_user
from regview.schemas.registry import REPOSITORY_NAME_PATTERN, TAG_PATTERN
from regview.schemas.response import DEFAULT_LIMIT, DEFAULT_PAGE, ApiResponse, PagedResponse, Pagination
from regview.services.registry_service import RegistryService

router = APIRouter(dependencies=[Depends(get_current_user)])

def get_registry_service():
    return RegistryService.get_instance()

@router.get("/")
async def list_repositories(
    request: Request,
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    service: RegistryService = Depends(get_registry_service)
):
    """List repositories with tag count and last push date. Paged when page or limit is given."""
    if page is None and limit is None:
        repositories = await service.list_repositories()
        return ApiResponse.success("Repositories retrieved", repositories)

    page = page or DEFAULT_PAGE
    limit = limit or DEFAULT_LIMIT
    repositories, total = await service.list_repositories_page(page, limit)
    return PagedResponse(
        status=200,
        message="Repositories retrieved",
        data=repositories,
        pagination=Pagination.build(page, limit, total, request.url.path),
    )

@router.get("/tags", response_model=ApiResponse)
async def list_tags(
    repository: str = Query(..., pattern=REPOSITORY_NAME_PATTERN),
    service: RegistryService = Depends(get_registry_service)
):
    """List every tag of a repository with digest, size and image metadata."""
    tags = await service.list_tag_details(repository)
    return ApiResponse.success(f"Tags for {repository} retrieved", tags)

@router.delete("/tags", response_model=ApiResponse)
async def delete_tag(
    repository: str = Query(..., pattern=REPOSITORY_NAME_PATTERN),
    tag: str = Query(..., pattern=TAG_PATTERN),
    service: RegistryService = Depends(get_registry_service)
):
    """Delete a tag's manifest from the registry (requires deletion enabled upstream)."""
    info = await service.delete_tag(repository, tag)
    return ApiResponse.success(f"Tag {repository}:{tag} deleted", info)
