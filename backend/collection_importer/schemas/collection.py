"""
Target collection document produced by an import.

Auth and body blocks are closed variant sets keyed by ``mode``. Each variant
only carries its own payload, but the serialized document always lists every
payload key so consumers see the full block shape (``null`` / ``[]`` for the
modes that are not selected).
"""
import uuid
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, SerializationInfo, model_serializer
from pydantic.alias_generators import to_camel

SCHEMA_VERSION = "1"


def new_uid() -> str:
    return str(uuid.uuid4())


class _DocumentModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
        "extra": "ignore",
    }


# ── Key/value records ──

class HeaderRecord(_DocumentModel):
    uid: str = Field(default_factory=new_uid)
    name: str = ""
    value: str = ""
    description: str = ""
    enabled: bool = True


class ParamRecord(HeaderRecord):
    type: Literal["query", "path"] = "query"


class FormField(HeaderRecord):
    pass


class MultipartField(HeaderRecord):
    type: Literal["text"] = "text"


# ── Auth ──

class BasicCredentials(_DocumentModel):
    username: str = ""
    password: str = ""


class BearerToken(_DocumentModel):
    token: str = ""


class DigestCredentials(_DocumentModel):
    username: str = ""
    password: str = ""


AUTH_PAYLOAD_KEYS = ("basic", "bearer", "digest")


class _AuthVariant(_DocumentModel):
    @model_serializer(mode="wrap")
    def _serialize_with_empty_modes(self, handler, info: SerializationInfo) -> dict[str, Any]:
        data = handler(self)
        for key in AUTH_PAYLOAD_KEYS:
            data.setdefault(key, None)
        return data


class NoAuth(_AuthVariant):
    mode: Literal["none"] = "none"


class BasicAuth(_AuthVariant):
    mode: Literal["basic"] = "basic"
    basic: BasicCredentials


class BearerAuth(_AuthVariant):
    mode: Literal["bearer"] = "bearer"
    bearer: BearerToken


class DigestAuth(_AuthVariant):
    mode: Literal["digest"] = "digest"
    digest: DigestCredentials


AuthBlock = Annotated[Union[NoAuth, BasicAuth, BearerAuth, DigestAuth], Field(discriminator="mode")]


# ── Body ──

class GraphqlPayload(_DocumentModel):
    query: str = ""
    variables: str = ""


BODY_SCALAR_KEYS = ("json", "text", "xml", "graphql")
BODY_LIST_KEYS = ("form_url_encoded", "multipart_form")


class _BodyVariant(_DocumentModel):
    @model_serializer(mode="wrap")
    def _serialize_with_empty_modes(self, handler, info: SerializationInfo) -> dict[str, Any]:
        data = handler(self)
        for key in BODY_SCALAR_KEYS:
            data.setdefault(key, None)
        for key in BODY_LIST_KEYS:
            data.setdefault(to_camel(key) if info.by_alias else key, [])
        return data


class NoBody(_BodyVariant):
    mode: Literal["none"] = "none"


class JsonBody(_BodyVariant):
    mode: Literal["json"] = "json"
    json_: str = Field(default="", alias="json")


class TextBody(_BodyVariant):
    mode: Literal["text"] = "text"
    text: str = ""


class XmlBody(_BodyVariant):
    mode: Literal["xml"] = "xml"
    xml: str = ""


class FormUrlEncodedBody(_BodyVariant):
    mode: Literal["formUrlEncoded"] = "formUrlEncoded"
    form_url_encoded: list[FormField] = []


class MultipartFormBody(_BodyVariant):
    mode: Literal["multipartForm"] = "multipartForm"
    multipart_form: list[MultipartField] = []


class GraphqlBody(_BodyVariant):
    mode: Literal["graphql"] = "graphql"
    graphql: GraphqlPayload = GraphqlPayload()


BodyBlock = Annotated[
    Union[NoBody, JsonBody, TextBody, XmlBody, FormUrlEncodedBody, MultipartFormBody, GraphqlBody],
    Field(discriminator="mode"),
]


# ── Items ──

class RequestSpec(_DocumentModel):
    url: str = ""
    method: str = ""
    auth: AuthBlock = NoAuth()
    headers: list[HeaderRecord] = []
    params: list[ParamRecord] = []
    body: BodyBlock = NoBody()


class _RequestNode(_DocumentModel):
    uid: str = Field(default_factory=new_uid)
    name: str = ""
    seq: int | None = None
    request: RequestSpec = RequestSpec()


class HttpRequestNode(_RequestNode):
    type: Literal["http-request"] = "http-request"


class GraphqlRequestNode(_RequestNode):
    type: Literal["graphql-request"] = "graphql-request"


class FolderNode(_DocumentModel):
    uid: str = Field(default_factory=new_uid)
    name: str = ""
    type: Literal["folder"] = "folder"
    items: list["CollectionNode"] = []


CollectionNode = Annotated[
    Union[FolderNode, HttpRequestNode, GraphqlRequestNode],
    Field(discriminator="type"),
]

RequestNode = Union[HttpRequestNode, GraphqlRequestNode]

FolderNode.model_rebuild()


# ── Environments ──

class VariableRecord(_DocumentModel):
    uid: str = Field(default_factory=new_uid)
    name: str
    value: str = ""
    enabled: bool = True
    secret: bool = False
    type: Literal["text"] = "text"


class Environment(_DocumentModel):
    uid: str = Field(default_factory=new_uid)
    name: str = ""
    variables: list[VariableRecord] = []


# ── Collection ──

class Collection(_DocumentModel):
    uid: str = Field(default_factory=new_uid)
    name: str = ""
    schema_version: str = SCHEMA_VERSION
    items: list[CollectionNode] = []
    environments: list[Environment] = []

    def to_document(self) -> dict[str, Any]:
        """Serialize to the camelCase document handed to consumers."""
        return self.model_dump(mode="json", by_alias=True)
