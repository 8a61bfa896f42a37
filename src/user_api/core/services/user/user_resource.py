"""Request handling for the user resource.

``UserResourceService`` implements the operations behind the ``/users``
routes independently of the web framework: it validates input, talks to the
repository and raises ``ResourceError`` subclasses that the application maps
to status codes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from src.user_api.core.errors import (
    ErrorCollector,
    InvalidArgumentError,
    NotFoundError,
    ValidationFailedError,
)
from src.user_api.core.services.pagination import (
    LinkBuilder,
    PaginationHeader,
    build_pagination_header,
    resolve_page_number,
    resolve_page_size,
)
from src.user_api.core.services.user.patch import apply_patch, parse_operations
from src.user_api.entities.core.user import (
    UserForCreate,
    UserForUpdate,
    UserRead,
    UserRepository,
    mapper,
)
from src.user_api.runtime.config.config_data import PaginationConfig

ALLOWED_METHODS = "POST, GET, OPTIONS"

# Route names used for Location headers and pagination links.
USER_ROUTE = "get_user_by_id"
USERS_ROUTE = "get_users"

RepresentationT = TypeVar("RepresentationT", bound=BaseModel)


@dataclass(frozen=True)
class CreatedResult:
    """A new resource exists at ``location``."""

    user_id: str
    location: str


@dataclass(frozen=True)
class UserListResult:
    items: list[UserRead]
    pagination: PaginationHeader


def parse_user_id(raw: Any) -> str | None:
    """Return the canonical form of a UUID string, or None if it is not one."""
    if not isinstance(raw, str):
        return None
    try:
        return str(uuid.UUID(raw.strip()))
    except ValueError:
        return None


def errors_by_field(exc: ValidationError) -> dict[str, list[str]]:
    """Group pydantic errors by their (camelCase) location."""
    collector = ErrorCollector()
    for error in exc.errors():
        key = ".".join(str(part) for part in error["loc"]) or "body"
        collector.add(key, error["msg"])
    return collector.as_dict()


def validate_payload(model: type[RepresentationT], payload: Any) -> RepresentationT:
    """Validate a decoded JSON body against ``model``.

    Raises:
        InvalidArgumentError: If there is no body or it is not a JSON object.
        ValidationFailedError: With every violated field constraint.
    """
    if payload is None:
        raise InvalidArgumentError("A request body is required")
    if not isinstance(payload, dict):
        raise InvalidArgumentError("The request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailedError(errors_by_field(exc)) from exc


class UserResourceService:
    """Operations of the ``/users`` resource."""

    def __init__(
        self,
        repository: UserRepository,
        link_builder: LinkBuilder,
        pagination: PaginationConfig | None = None,
    ) -> None:
        self._repository = repository
        self._link_builder = link_builder
        self._pagination = pagination or PaginationConfig()

    def read_one(self, raw_id: Any) -> UserRead:
        user_id = parse_user_id(raw_id)
        if user_id is None:
            raise InvalidArgumentError(f"'{raw_id}' is not a valid user id")

        user = self._repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return mapper.entity_to_read(user)

    def create(self, payload: Any) -> CreatedResult:
        representation = validate_payload(UserForCreate, payload)
        created = self._repository.insert(mapper.create_to_entity(representation))
        logger.info("Created user {}", created.id)
        return self._created(created.id)

    def replace(self, raw_id: Any, payload: Any) -> CreatedResult | None:
        """Upsert the user at ``raw_id``.

        Returns:
            A ``CreatedResult`` when the id was unseen, None when an existing
            user was overwritten.
        """
        representation = validate_payload(UserForUpdate, payload)
        user_id = parse_user_id(raw_id)
        if user_id is None:
            raise InvalidArgumentError(f"'{raw_id}' is not a valid user id")

        stored, inserted = self._repository.update_or_insert(
            mapper.update_to_entity(representation, user_id)
        )
        if inserted:
            logger.info("Created user {} by replace", stored.id)
            return self._created(stored.id)

        logger.info("Replaced user {}", stored.id)
        return None

    def partially_update(self, raw_id: Any, payload: Any) -> None:
        """Apply a patch document to the user at ``raw_id``.

        The patched representation is validated in full before anything is
        written; on any error the stored user is left untouched.
        """
        user_id = parse_user_id(raw_id)
        if user_id is None:
            raise NotFoundError(f"'{raw_id}' is not a valid user id")
        operations = parse_operations(payload)

        user = self._repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        result = apply_patch(mapper.entity_to_update(user), operations)
        errors = ErrorCollector()
        errors.extend(result.errors)
        try:
            patched = UserForUpdate.model_validate(result.document)
        except ValidationError as exc:
            errors.extend(errors_by_field(exc))

        if errors:
            logger.info("Rejected patch of user {}: {}", user_id, errors.as_dict())
            errors.raise_if_any()

        try:
            self._repository.update(mapper.update_to_entity(patched, user_id))
        except ValueError as exc:
            raise NotFoundError(f"User {user_id} not found") from exc
        logger.info("Patched user {}", user_id)

    def delete(self, raw_id: Any) -> None:
        user_id = parse_user_id(raw_id)
        if user_id is None:
            raise NotFoundError(f"'{raw_id}' is not a valid user id")
        if not self._repository.delete(user_id):
            raise NotFoundError(f"User {user_id} not found")
        logger.info("Deleted user {}", user_id)

    def list_page(
        self, raw_page_number: str | None, raw_page_size: str | None
    ) -> UserListResult:
        page_number = resolve_page_number(raw_page_number, self._pagination)
        page_size = resolve_page_size(raw_page_size, self._pagination)

        page = self._repository.get_page(page_number, page_size)
        return UserListResult(
            items=[mapper.entity_to_read(user) for user in page.items],
            pagination=build_pagination_header(page, self._link_builder, USERS_ROUTE),
        )

    def options(self) -> str:
        return ALLOWED_METHODS

    def _created(self, user_id: str) -> CreatedResult:
        location = self._link_builder(USER_ROUTE, path_params={"user_id": user_id})
        return CreatedResult(user_id=user_id, location=location)
