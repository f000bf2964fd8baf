"""
Stages applied to a converted collection before it is returned: item
normalization, sequence numbering and schema validation.
"""
from typing import Iterator

from pydantic import ValidationError

from collection_importer.core.errors import CollectionSchemaError
from collection_importer.schemas.collection import (
    Collection,
    CollectionNode,
    FolderNode,
)


def _map_items(items: list[CollectionNode], fn) -> list[CollectionNode]:
    result: list[CollectionNode] = []
    for item in items:
        if isinstance(item, FolderNode):
            item = item.model_copy(update={"items": _map_items(item.items, fn)})
        result.append(fn(item))
    return result


def iter_nodes(items: list[CollectionNode]) -> Iterator[CollectionNode]:
    for item in items:
        yield item
        if isinstance(item, FolderNode):
            yield from iter_nodes(item.items)


def transform_items(collection: Collection) -> Collection:
    """Upper-case request methods; an empty method becomes GET.

    Custom verbs (``PROPFIND``, ``PURGE``, ...) are kept.
    """

    def normalize(item: CollectionNode) -> CollectionNode:
        if isinstance(item, FolderNode):
            return item
        method = item.request.method.strip().upper() or "GET"
        if method == item.request.method:
            return item
        request = item.request.model_copy(update={"method": method})
        return item.model_copy(update={"request": request})

    return collection.model_copy(update={"items": _map_items(collection.items, normalize)})


def _number_level(items: list[CollectionNode]) -> list[CollectionNode]:
    result: list[CollectionNode] = []
    seq = 0
    for item in items:
        if isinstance(item, FolderNode):
            result.append(item.model_copy(update={"items": _number_level(item.items)}))
        else:
            seq += 1
            result.append(item.model_copy(update={"seq": seq}))
    return result


def hydrate_sequence(collection: Collection) -> Collection:
    """Number the requests of every folder level 1..n, skipping folders."""
    return collection.model_copy(update={"items": _number_level(collection.items)})


def validate_schema(collection: Collection) -> Collection:
    """Re-validate the serialized document and check uid uniqueness."""
    try:
        validated = Collection.model_validate(collection.to_document())
    except ValidationError as e:
        raise CollectionSchemaError(f"collection does not match the schema: {e}") from e

    uids = [collection.uid]
    for node in iter_nodes(validated.items):
        uids.append(node.uid)
        if not isinstance(node, FolderNode):
            request = node.request
            uids.extend(record.uid for record in request.headers)
            uids.extend(record.uid for record in request.params)
            uids.extend(record.uid for record in getattr(request.body, "form_url_encoded", []))
            uids.extend(record.uid for record in getattr(request.body, "multipart_form", []))
    for environment in validated.environments:
        uids.append(environment.uid)
        uids.extend(variable.uid for variable in environment.variables)

    if len(uids) != len(set(uids)):
        raise CollectionSchemaError("collection contains duplicate uids")
    return validated


DEFAULT_STAGES = (transform_items, hydrate_sequence, validate_schema)
