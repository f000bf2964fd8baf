"""
Import pipeline: load -> convert -> downstream stages -> result.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from collection_importer.core.errors import (
    ImportFailedError,
    ImportParseError,
    ImportStructureError,
)
from collection_importer.schemas.collection import Collection, FolderNode, GraphqlRequestNode
from collection_importer.services.file_loader import AsyncReadable, load_document
from collection_importer.services.insomnia_import import convert_insomnia_export
from collection_importer.services.postprocess import DEFAULT_STAGES, iter_nodes

logger = logging.getLogger(__name__)

Stage = Callable[[Collection], Collection]


@dataclass(frozen=True)
class ImportResult:
    collection: Collection


def run_downstream(collection: Collection, stages: Sequence[Stage] = DEFAULT_STAGES) -> Collection:
    for stage in stages:
        collection = stage(collection)
    return collection


async def import_collection(
    source: AsyncReadable | str | Path,
    *,
    stages: Sequence[Stage] = DEFAULT_STAGES,
) -> ImportResult:
    """Import an Insomnia export from an upload or a local file.

    Parse and structure errors are raised as-is; anything else (read errors,
    downstream stage failures) becomes ``ImportFailedError``.
    """
    try:
        document = await load_document(source)
        collection = convert_insomnia_export(document)
        collection = run_downstream(collection, stages)
    except (ImportParseError, ImportStructureError):
        raise
    except Exception as e:
        logger.error("Import collection failed: %s", e)
        raise ImportFailedError(str(e)) from e

    summary = summarize(collection)
    logger.info(
        "Imported collection '%s': %d folders, %d requests, %d environments",
        collection.name, summary["total_folders"], summary["total_requests"], len(summary["environments"]),
    )
    return ImportResult(collection=collection)


def summarize(collection: Collection) -> dict:
    """Count folders, requests and environment variables of a collection."""
    folders = 0
    requests = 0
    graphql_requests = 0
    for node in iter_nodes(collection.items):
        if isinstance(node, FolderNode):
            folders += 1
        else:
            requests += 1
            if isinstance(node, GraphqlRequestNode):
                graphql_requests += 1

    return {
        "name": collection.name,
        "total_folders": folders,
        "total_requests": requests,
        "total_graphql_requests": graphql_requests,
        "environments": [
            {"name": env.name, "variables_count": len(env.variables)}
            for env in collection.environments
        ],
    }
