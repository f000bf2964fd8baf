"""
Models for the resources of an Insomnia export (``{"resources": [...]}``).

The exporter keys resources by ``_id``/``_type``; plain ``id``/``type`` are
accepted too. Every field is optional and list fields tolerate junk so that
a partially broken export still converts.
"""
import json
from enum import Enum as PyEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator


class ResourceType(str, PyEnum):
    WORKSPACE = "workspace"
    REQUEST_GROUP = "request_group"
    REQUEST = "request"
    ENVIRONMENT = "environment"


def to_text(value: Any) -> str:
    """Coerce a scalar from the export to text (``None`` -> ``""``).

    Integral floats drop their fraction (``1.0`` -> ``"1"``); containers are
    JSON-encoded with non-ASCII characters kept.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return json.dumps(value, ensure_ascii=False)


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


class InsomniaPair(BaseModel):
    """Header, query parameter or form parameter record."""

    name: str = ""
    value: str = ""
    description: str = ""
    disabled: bool = False

    model_config = {"extra": "ignore"}

    @field_validator("name", "value", "description", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return to_text(v)

    @field_validator("disabled", mode="before")
    @classmethod
    def _coerce_flag(cls, v: Any) -> bool:
        return bool(v)


class InsomniaAuthentication(BaseModel):
    type: str = ""
    username: str = ""
    password: str = ""
    token: str = ""

    model_config = {"extra": "ignore"}

    @field_validator("type", "username", "password", "token", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return to_text(v)


class InsomniaBody(BaseModel):
    mime_type: str = Field(default="", validation_alias=AliasChoices("mimeType", "mime_type"))
    text: str = ""
    params: list[InsomniaPair] = []

    model_config = {"extra": "ignore"}

    @field_validator("mime_type", "text", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return to_text(v)

    @field_validator("params", mode="before")
    @classmethod
    def _coerce_params(cls, v: Any) -> list:
        return [p for p in _as_list(v) if isinstance(p, dict)]

    @property
    def base_mime_type(self) -> str:
        return self.mime_type.split(";")[0].strip().lower()


class InsomniaResource(BaseModel):
    id: str = Field(default="", validation_alias=AliasChoices("_id", "id"))
    parent_id: str | None = Field(default=None, validation_alias=AliasChoices("parentId", "parent_id"))
    type: str = Field(default="", validation_alias=AliasChoices("_type", "type"))
    name: str = ""

    model_config = {"extra": "ignore", "frozen": True}

    @field_validator("id", "type", "name", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return to_text(v)

    @field_validator("parent_id", mode="before")
    @classmethod
    def _coerce_parent(cls, v: Any) -> str | None:
        return None if v is None else to_text(v)


class InsomniaWorkspace(InsomniaResource):
    pass


class InsomniaRequestGroup(InsomniaResource):
    pass


class InsomniaRequest(InsomniaResource):
    url: str = ""
    method: str = ""
    headers: list[InsomniaPair] = []
    parameters: list[InsomniaPair] = []
    path_parameters: list[InsomniaPair] = Field(
        default=[], validation_alias=AliasChoices("pathParameters", "path_parameters")
    )
    authentication: InsomniaAuthentication = InsomniaAuthentication()
    body: InsomniaBody = InsomniaBody()

    @field_validator("url", "method", mode="before")
    @classmethod
    def _coerce_request_text(cls, v: Any) -> str:
        return to_text(v)

    @field_validator("headers", "parameters", "path_parameters", mode="before")
    @classmethod
    def _coerce_pairs(cls, v: Any) -> list:
        return [p for p in _as_list(v) if isinstance(p, dict)]

    @field_validator("authentication", "body", mode="before")
    @classmethod
    def _coerce_mapping(cls, v: Any) -> dict:
        if not isinstance(v, dict):
            return {}
        return {to_text(key): value for key, value in v.items()}


class InsomniaEnvironment(InsomniaResource):
    data: dict[str, Any] = {}

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, v: Any) -> dict:
        if not isinstance(v, dict):
            return {}
        return {to_text(key): value for key, value in v.items()}


RESOURCE_MODELS: dict[str, type[InsomniaResource]] = {
    ResourceType.WORKSPACE.value: InsomniaWorkspace,
    ResourceType.REQUEST_GROUP.value: InsomniaRequestGroup,
    ResourceType.REQUEST.value: InsomniaRequest,
    ResourceType.ENVIRONMENT.value: InsomniaEnvironment,
}


def parse_resources(document: Any) -> list[InsomniaResource]:
    """Parse the recognised resources of an export, in document order.

    Unknown resource types and entries that are not mappings are skipped.
    """
    if not isinstance(document, dict):
        return []
    result: list[InsomniaResource] = []
    for raw in _as_list(document.get("resources")):
        if not isinstance(raw, dict):
            continue
        resource_type = raw.get("_type", raw.get("type"))
        model = RESOURCE_MODELS.get(resource_type) if isinstance(resource_type, str) else None
        if model is None:
            continue
        result.append(model.model_validate(raw))
    return result
