"""Request payload decoding for transports sitting above the registry.

Change descriptions are tagged with ``@type``::

    {"@type": "updateComment", "newComment": "..."}
    {"@type": "setProperty", "property": "k", "value": "v"}
    {"@type": "removeProperty", "property": "k"}

Anything that does not decode into one of these fails with
``InvalidArgumentError`` before the registry is called.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from metacat.changes import CatalogChange, RemoveProperty, SetComment, SetProperty
from metacat.errors import InvalidArgumentError
from metacat.identifiers import NameIdentifier, Namespace


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)


class UpdateCommentRequest(_Request):
    type: Literal["updateComment"] = Field(alias="@type")
    new_comment: str | None = Field(default=None, alias="newComment")

    def to_change(self) -> CatalogChange:
        return SetComment(self.new_comment)


class SetPropertyRequest(_Request):
    type: Literal["setProperty"] = Field(alias="@type")
    property: str = Field(min_length=1)
    value: str

    def to_change(self) -> CatalogChange:
        return SetProperty(self.property, self.value)


class RemovePropertyRequest(_Request):
    type: Literal["removeProperty"] = Field(alias="@type")
    property: str = Field(min_length=1)

    def to_change(self) -> CatalogChange:
        return RemoveProperty(self.property)


CatalogUpdateRequest = Annotated[
    Union[UpdateCommentRequest, SetPropertyRequest, RemovePropertyRequest],
    Field(discriminator="type"),
]


class CatalogUpdatesRequest(_Request):
    updates: list[CatalogUpdateRequest]

    def changes(self) -> list[CatalogChange]:
        return [u.to_change() for u in self.updates]


class CatalogCreateRequest(_Request):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    comment: str | None = None
    properties: dict[str, str] = Field(default_factory=dict)

    def identifier(self, metalake: str) -> NameIdentifier:
        return NameIdentifier(Namespace.of_metalake(metalake), self.name)


_UPDATE_LIST = TypeAdapter(list[CatalogUpdateRequest])


def _describe(err: PydanticValidationError) -> str:
    parts = []
    for item in err.errors():
        loc = ".".join(str(p) for p in item["loc"])
        parts.append(f"{loc}: {item['msg']}" if loc else item["msg"])
    return "; ".join(parts)


def decode_changes(payload: Any) -> list[CatalogChange]:
    """Decode a change list, or an ``{"updates": [...]}`` envelope, into changes."""
    try:
        if isinstance(payload, dict):
            return CatalogUpdatesRequest.model_validate(payload).changes()
        return [u.to_change() for u in _UPDATE_LIST.validate_python(payload)]
    except PydanticValidationError as e:
        raise InvalidArgumentError(f"Invalid catalog change request: {_describe(e)}") from e


def decode_create_request(payload: Any) -> CatalogCreateRequest:
    try:
        return CatalogCreateRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise InvalidArgumentError(f"Invalid catalog create request: {_describe(e)}") from e
