"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from fastapi import Depends, Request
from sqlmodel import Session

from src.user_api.api.http.app_data import ApplicationDependencies
from src.user_api.core.services import UserResourceService
from src.user_api.core.services.pagination import LinkBuilder
from src.user_api.entities.core.user import UserRepository


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    """Get the dependencies built at startup."""
    return request.app.state.app_dependencies


def get_session(request: Request) -> Iterator[Session]:
    """Get a database session scoped to the request."""
    app_deps = get_app_dependencies(request)
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


class RequestLinkBuilder:
    """Builds absolute URIs for named routes relative to the current request."""

    def __init__(self, request: Request) -> None:
        self._request = request

    def __call__(
        self,
        route_name: str,
        path_params: Mapping[str, Any] | None = None,
        query_params: Mapping[str, Any] | None = None,
    ) -> str:
        url = self._request.url_for(
            route_name, **{k: str(v) for k, v in (path_params or {}).items()}
        )
        if query_params:
            url = url.include_query_params(**query_params)
        return str(url)


def get_link_builder(request: Request) -> LinkBuilder:
    return RequestLinkBuilder(request)


def get_user_repository(session: Session = Depends(get_session)) -> UserRepository:
    """Get the user repository bound to the request session."""
    return UserRepository(session)


def get_user_resource_service(
    request: Request,
    repository: UserRepository = Depends(get_user_repository),
    link_builder: LinkBuilder = Depends(get_link_builder),
) -> UserResourceService:
    """Get the user resource service for this request."""
    config = get_app_dependencies(request).config
    return UserResourceService(
        repository=repository,
        link_builder=link_builder,
        pagination=config.pagination,
    )
