"""Request-level failures raised by the service layer.

Each error carries the HTTP status it maps to; the application translates them
into responses in one place (see ``api/http/app.py``).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence


class ResourceError(Exception):
    """Base class for per-request failures."""

    status_code: int = 500
    default_detail: str = "Request failed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidArgumentError(ResourceError):
    """Malformed identifier or missing/unusable request body."""

    status_code = 400
    default_detail = "Bad request"


class NotFoundError(ResourceError):
    """No resource exists for the given identifier."""

    status_code = 404
    default_detail = "Not found"


class NotAcceptableError(ResourceError):
    """None of the media types the client accepts can be produced."""

    status_code = 406
    default_detail = "Not acceptable"


class ValidationFailedError(ResourceError):
    """One or more field constraints were violated.

    ``errors`` maps a field name (or patch path) to every message recorded
    against it.
    """

    status_code = 422
    default_detail = "Validation failed"

    def __init__(
        self,
        errors: Mapping[str, Sequence[str]],
        detail: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.errors: dict[str, list[str]] = {
            key: list(messages) for key, messages in errors.items()
        }


class ErrorCollector:
    """Accumulates field-level messages without short-circuiting."""

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def add(self, key: str, message: str) -> None:
        self._errors.setdefault(key, []).append(message)

    def extend(self, errors: Mapping[str, Sequence[str]]) -> None:
        for key, messages in errors.items():
            for message in messages:
                self.add(key, message)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def as_dict(self) -> dict[str, list[str]]:
        return {key: list(messages) for key, messages in self._errors.items()}

    def raise_if_any(self) -> None:
        if self._errors:
            raise ValidationFailedError(self.as_dict())
