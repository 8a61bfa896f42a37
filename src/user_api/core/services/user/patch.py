"""Partial updates expressed as JSON-Patch style operations.

Operations are applied to a copy of a representation's data. Structural
problems (unknown paths, missing values, failed tests) are collected rather
than raised so the caller can report all of them together with the field
validation that follows.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.user_api.core.errors import ErrorCollector, InvalidArgumentError


class PatchOp(StrEnum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    MOVE = "move"
    COPY = "copy"
    TEST = "test"


class PatchOperation(BaseModel):
    """One instruction of a patch document."""

    model_config = ConfigDict(populate_by_name=True)

    op: PatchOp
    path: str
    value: Any = None
    from_: str | None = Field(default=None, alias="from")

    @field_validator("op", mode="before")
    @classmethod
    def _normalise_op(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def has_value(self) -> bool:
        """Whether ``value`` was supplied, even as null."""
        return "value" in self.model_fields_set


def parse_operations(payload: Any) -> list[PatchOperation]:
    """Read a patch document from a decoded JSON body.

    Raises:
        InvalidArgumentError: If the body is missing, not a list, or holds an
            element that is not an operation.
    """
    if payload is None:
        raise InvalidArgumentError("A patch document is required")
    if not isinstance(payload, list):
        raise InvalidArgumentError("A patch document must be a JSON array")

    operations = []
    for index, item in enumerate(payload):
        try:
            operations.append(PatchOperation.model_validate(item))
        except ValidationError as exc:
            raise InvalidArgumentError(
                f"Malformed patch operation at index {index}: "
                + "; ".join(error["msg"] for error in exc.errors())
            ) from exc
    return operations


@dataclass
class PatchResult:
    document: dict[str, Any]
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def _field_index(model: type[BaseModel]) -> dict[str, str]:
    """Map lower-cased field names and aliases to the wire (alias) key."""
    index = {}
    for name, info in model.model_fields.items():
        key = info.alias or name
        index[name.lower()] = key
        index[key.lower()] = key
    return index


def _resolve(pointer: str | None, fields: dict[str, str]) -> str | None:
    if not pointer:
        return None
    segment = pointer[1:] if pointer.startswith("/") else pointer
    if not segment or "/" in segment:
        return None
    segment = segment.replace("~1", "/").replace("~0", "~")
    return fields.get(segment.lower())


def apply_patch(
    representation: BaseModel, operations: Sequence[PatchOperation]
) -> PatchResult:
    """Apply ``operations`` in order to a copy of ``representation``'s data.

    The representation itself is never modified. The returned document still
    has to be validated against the representation's model.
    """
    document = representation.model_dump(by_alias=True)
    fields = _field_index(type(representation))
    errors = ErrorCollector()

    for operation in operations:
        path = operation.path
        target = _resolve(path, fields)
        if target is None:
            errors.add(path, f"The target location specified by path '{path}' was not found.")
            continue

        if operation.op in (PatchOp.ADD, PatchOp.REPLACE, PatchOp.TEST):
            if not operation.has_value:
                errors.add(path, f"The '{operation.op}' operation requires a value.")
                continue

        if operation.op in (PatchOp.ADD, PatchOp.REPLACE):
            document[target] = operation.value
        elif operation.op == PatchOp.REMOVE:
            document[target] = None
        elif operation.op in (PatchOp.MOVE, PatchOp.COPY):
            source = _resolve(operation.from_, fields)
            if source is None:
                errors.add(
                    path,
                    f"The source location specified by from '{operation.from_}' was not found.",
                )
                continue
            value = document[source]
            document[target] = value
            if operation.op == PatchOp.MOVE and source != target:
                document[source] = None
        elif operation.op == PatchOp.TEST:
            current = document[target]
            if current != operation.value:
                errors.add(
                    path,
                    f"The current value '{current}' at path '{path}' is not equal "
                    f"to the test value '{operation.value}'.",
                )

    return PatchResult(document=document, errors=errors.as_dict())
