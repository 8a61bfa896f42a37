"""Wire representations of the user resource.

Field names are snake_case in Python and lowerCamelCase on the wire; input
accepts either spelling.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _Representation(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class UserForCreate(_Representation):
    """Payload accepted by ``POST /users``; the identifier is assigned on insert."""

    first_name: NameStr = Field(description="User's first name")
    last_name: NameStr = Field(description="User's last name")
    email: str | None = Field(default=None, description="User's email address")
    phone: str | None = Field(default=None, description="User's phone number")
    address: str | None = Field(default=None, description="User's address")


class UserForUpdate(_Representation):
    """Payload accepted by ``PUT /users/{id}`` and the target of patch operations."""

    first_name: NameStr = Field(description="User's first name")
    last_name: NameStr = Field(description="User's last name")
    email: str | None = Field(default=None, description="User's email address")
    phone: str | None = Field(default=None, description="User's phone number")
    address: str | None = Field(default=None, description="User's address")


class UserRead(_Representation):
    """Representation returned to clients."""

    id: str
    first_name: str
    last_name: str
    display_name: str = Field(description="Last name followed by first name")
    email: str | None = None
    phone: str | None = None
    address: str | None = None
