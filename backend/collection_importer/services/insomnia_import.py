"""
Conversion of an Insomnia export into a collection document.
"""
import json
import logging
from collections import defaultdict
from typing import Any, Iterable, Sequence

from collection_importer.config import settings
from collection_importer.core.errors import ImportStructureError
from collection_importer.schemas.collection import (
    AuthBlock,
    BasicAuth,
    BasicCredentials,
    BearerAuth,
    BearerToken,
    BodyBlock,
    Collection,
    CollectionNode,
    Environment,
    FolderNode,
    FormField,
    FormUrlEncodedBody,
    GraphqlBody,
    GraphqlPayload,
    GraphqlRequestNode,
    HeaderRecord,
    HttpRequestNode,
    JsonBody,
    MultipartField,
    MultipartFormBody,
    NoAuth,
    NoBody,
    ParamRecord,
    RequestNode,
    RequestSpec,
    TextBody,
    VariableRecord,
    XmlBody,
)
from collection_importer.schemas.insomnia import (
    InsomniaAuthentication,
    InsomniaBody,
    InsomniaEnvironment,
    InsomniaRequest,
    InsomniaRequestGroup,
    InsomniaResource,
    InsomniaWorkspace,
    parse_resources,
    to_text,
)
from collection_importer.services.naming import dedupe_name
from collection_importer.services.variables import normalize_variables

logger = logging.getLogger(__name__)

FLATTEN_DELIMITER = "_"


# ────────────────────────────────────────────────────────────
# Request mapping
# ────────────────────────────────────────────────────────────

def _parse_graphql(text: str) -> GraphqlPayload:
    """Split a GraphQL body (JSON with ``query`` and ``variables``)."""
    try:
        graphql = json.loads(text)
    except json.JSONDecodeError:
        logger.debug("Malformed GraphQL body, importing it empty")
        return GraphqlPayload()
    if not isinstance(graphql, dict):
        return GraphqlPayload()

    variables = graphql.get("variables")
    return GraphqlPayload(
        query=to_text(graphql.get("query")),
        variables=json.dumps(variables, indent=2, ensure_ascii=False) if variables is not None else "",
    )


def map_auth(authentication: InsomniaAuthentication) -> AuthBlock:
    if authentication.type == "basic":
        return BasicAuth(
            basic=BasicCredentials(
                username=normalize_variables(authentication.username),
                password=normalize_variables(authentication.password),
            )
        )
    if authentication.type == "bearer":
        return BearerAuth(bearer=BearerToken(token=normalize_variables(authentication.token)))
    if authentication.type:
        logger.debug("Unsupported auth type %r, importing as none", authentication.type)
    return NoAuth()


def map_body(body: InsomniaBody) -> BodyBlock:
    mime_type = body.base_mime_type

    if mime_type == "application/json":
        return JsonBody(json_=normalize_variables(body.text))
    if mime_type == "application/x-www-form-urlencoded":
        return FormUrlEncodedBody(form_url_encoded=[
            FormField(
                name=param.name,
                value=normalize_variables(param.value),
                description=param.description,
                enabled=not param.disabled,
            )
            for param in body.params
        ])
    if mime_type == "multipart/form-data":
        return MultipartFormBody(multipart_form=[
            MultipartField(
                name=param.name,
                value=normalize_variables(param.value),
                description=param.description,
                enabled=not param.disabled,
            )
            for param in body.params
        ])
    if mime_type == "text/plain":
        return TextBody(text=normalize_variables(body.text))
    if mime_type in ("text/xml", "application/xml"):
        return XmlBody(xml=normalize_variables(body.text))
    if mime_type == "application/graphql":
        return GraphqlBody(graphql=_parse_graphql(normalize_variables(body.text)))

    if mime_type:
        logger.debug("Unsupported body MIME type %r, importing without body", mime_type)
    return NoBody()


def transform_request(
    request: InsomniaRequest,
    index: int,
    siblings: Sequence[InsomniaRequest],
) -> RequestNode:
    """Map one Insomnia request to a request node."""
    params = [
        ParamRecord(
            name=param.name,
            value=normalize_variables(param.value),
            description=param.description,
            type="query",
            enabled=not param.disabled,
        )
        for param in request.parameters
    ]
    params.extend(
        ParamRecord(name=param.name, value=param.value, description="", type="path", enabled=True)
        for param in request.path_parameters
    )

    body = map_body(request.body)
    spec = RequestSpec(
        url=normalize_variables(request.url),
        method=request.method,
        auth=map_auth(request.authentication),
        headers=[
            HeaderRecord(
                name=header.name,
                value=normalize_variables(header.value),
                description=header.description,
                enabled=not header.disabled,
            )
            for header in request.headers
        ],
        params=params,
        body=body,
    )

    node_type = GraphqlRequestNode if isinstance(body, GraphqlBody) else HttpRequestNode
    return node_type(name=dedupe_name(siblings, index), request=spec)


# ────────────────────────────────────────────────────────────
# Hierarchy
# ────────────────────────────────────────────────────────────

def find_workspace(resources: Iterable[InsomniaResource]) -> InsomniaWorkspace:
    for resource in resources:
        if isinstance(resource, InsomniaWorkspace):
            return resource
    raise ImportStructureError("no workspace found in Insomnia export")


def partition_resources(
    resources: Iterable[InsomniaResource],
) -> tuple[list[InsomniaResource], list[InsomniaEnvironment]]:
    """Split resources into tree members (groups, requests) and environments."""
    tree: list[InsomniaResource] = []
    environments: list[InsomniaEnvironment] = []
    for resource in resources:
        if isinstance(resource, (InsomniaRequestGroup, InsomniaRequest)):
            tree.append(resource)
        elif isinstance(resource, InsomniaEnvironment):
            environments.append(resource)
    return tree, environments


def index_by_parent(resources: Iterable[InsomniaResource]) -> dict[str | None, list[InsomniaResource]]:
    children: dict[str | None, list[InsomniaResource]] = defaultdict(list)
    for resource in resources:
        children[resource.parent_id].append(resource)
    return children


class _PathGuard:
    """Tracks the ids on the current descent to reject cyclic parent chains."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self._path: list[str] = []

    def enter(self, resource_id: str) -> None:
        if resource_id in self._path:
            raise ImportStructureError(f"cyclic parent reference at resource '{resource_id}'")
        if len(self._path) >= self.max_depth:
            raise ImportStructureError(f"resources nested deeper than {self.max_depth} levels")
        self._path.append(resource_id)

    def leave(self) -> None:
        self._path.pop()


def build_tree(
    resources: Iterable[InsomniaResource],
    root_id: str,
    max_depth: int | None = None,
) -> list[CollectionNode]:
    """Nest request groups and requests under ``root_id``.

    Within every level, folders come first and are followed by requests;
    folders and requests are de-duplicated separately.
    """
    children = index_by_parent(resources)
    guard = _PathGuard(settings.MAX_NESTING_DEPTH if max_depth is None else max_depth)

    def build_level(parent_id: str) -> list[CollectionNode]:
        level = children.get(parent_id, [])
        groups = [r for r in level if isinstance(r, InsomniaRequestGroup)]
        requests = [r for r in level if isinstance(r, InsomniaRequest)]

        nodes: list[CollectionNode] = []
        for index, group in enumerate(groups):
            name = dedupe_name(groups, index)
            guard.enter(group.id)
            try:
                items = build_level(group.id)
            finally:
                guard.leave()
            nodes.append(FolderNode(name=name, items=items))

        nodes.extend(transform_request(request, index, requests) for index, request in enumerate(requests))
        return nodes

    guard.enter(root_id)
    return build_level(root_id)


# ────────────────────────────────────────────────────────────
# Environments
# ────────────────────────────────────────────────────────────

def flatten_data(data: Any, prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings/lists into ``_``-joined key paths.

    Empty containers are kept as leaves. Lossy: flattened keys cannot be
    expanded back into the original structure.
    """
    flat: dict[str, Any] = {}
    if isinstance(data, dict):
        entries: Iterable[tuple[Any, Any]] = data.items()
    else:
        entries = enumerate(data)

    for key, value in entries:
        key = to_text(key)
        path = f"{prefix}{FLATTEN_DELIMITER}{key}" if prefix else key
        if isinstance(value, (dict, list)) and value:
            flat.update(flatten_data(value, path))
        else:
            flat[path] = value
    return flat


def transform_environment(environment: InsomniaEnvironment) -> Environment:
    return Environment(
        name=environment.name,
        variables=[
            VariableRecord(name=key, value=normalize_variables(to_text(value)))
            for key, value in flatten_data(environment.data).items()
        ],
    )


def build_environments(
    environments: Iterable[InsomniaEnvironment],
    root_id: str,
    max_depth: int | None = None,
) -> list[Environment]:
    """Environments under ``root_id``, each followed by its sub-environments."""
    children = index_by_parent(environments)
    guard = _PathGuard(settings.MAX_NESTING_DEPTH if max_depth is None else max_depth)

    def build_level(parent_id: str) -> list[Environment]:
        result: list[Environment] = []
        for environment in children.get(parent_id, []):
            result.append(transform_environment(environment))
            guard.enter(environment.id)
            try:
                result.extend(build_level(environment.id))
            finally:
                guard.leave()
        return result

    guard.enter(root_id)
    return build_level(root_id)


# ────────────────────────────────────────────────────────────
# Entry point
# ────────────────────────────────────────────────────────────

def convert_insomnia_export(document: Any) -> Collection:
    """Convert a parsed Insomnia export into a collection."""
    resources = parse_resources(document)
    workspace = find_workspace(resources)
    tree_resources, environments = partition_resources(resources)

    return Collection(
        name=workspace.name,
        items=build_tree(tree_resources, workspace.id),
        environments=build_environments(environments, workspace.id),
    )
