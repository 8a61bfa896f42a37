"""User API router."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from starlette.responses import Response

from src.user_api.api.http.deps import get_user_resource_service
from src.user_api.api.http.negotiation import get_response_media_type, render
from src.user_api.core.services.user import (
    USER_ROUTE,
    USERS_ROUTE,
    CreatedResult,
    UserResourceService,
)

router = APIRouter(prefix="/users", tags=["users"])

PAGINATION_HEADER = "X-Pagination"


def _created_response(created: CreatedResult, media_type: str) -> Response:
    return render(
        created.user_id,
        media_type,
        root="id",
        status_code=201,
        headers={"Location": created.location},
    )


@router.get("/{user_id}", name=USER_ROUTE)
def get_user_by_id(
    user_id: str,
    media_type: str = Depends(get_response_media_type),
    service: UserResourceService = Depends(get_user_resource_service),
) -> Response:
    """Get a user by ID."""
    return render(service.read_one(user_id), media_type, root="user")


@router.head("/{user_id}")
def head_user_by_id(
    user_id: str,
    media_type: str = Depends(get_response_media_type),
    service: UserResourceService = Depends(get_user_resource_service),
) -> Response:
    """Check that a user exists without transferring it."""
    service.read_one(user_id)
    return Response(status_code=200, media_type=media_type)


@router.post("", status_code=201)
def create_user(
    payload: Any = Body(default=None),
    media_type: str = Depends(get_response_media_type),
    service: UserResourceService = Depends(get_user_resource_service),
) -> Response:
    """Create a user; the response body is the new ID."""
    return _created_response(service.create(payload), media_type)


@router.put("/{user_id}")
def update_user(
    user_id: str,
    payload: Any = Body(default=None),
    media_type: str = Depends(get_response_media_type),
    service: UserResourceService = Depends(get_user_resource_service),
) -> Response:
    """Replace a user, creating it when the ID is unseen."""
    created = service.replace(user_id, payload)
    if created is None:
        return Response(status_code=204)
    return _created_response(created, media_type)


@router.patch("/{user_id}", status_code=204)
def partially_update_user(
    user_id: str,
    payload: Any = Body(default=None),
    service: UserResourceService = Depends(get_user_resource_service),
) -> Response:
    """Apply a list of patch operations to a user."""
    service.partially_update(user_id, payload)
    return Response(status_code=204)


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: str,
    service: UserResourceService = Depends(get_user_resource_service),
) -> Response:
    """Delete a user."""
    service.delete(user_id)
    return Response(status_code=204)


@router.get("", name=USERS_ROUTE)
def get_users(
    page_number: str | None = Query(default=None, alias="pageNumber"),
    page_size: str | None = Query(default=None, alias="pageSize"),
    media_type: str = Depends(get_response_media_type),
    service: UserResourceService = Depends(get_user_resource_service),
) -> Response:
    """List users one page at a time; navigation goes in the X-Pagination header."""
    result = service.list_page(page_number, page_size)
    return render(
        result.items,
        media_type,
        root="users",
        headers={PAGINATION_HEADER: result.pagination.to_header_value()},
    )


@router.options("")
def get_options(
    service: UserResourceService = Depends(get_user_resource_service),
) -> Response:
    """Advertise the methods supported on the collection."""
    return Response(status_code=200, headers={"Allow": service.options()})
