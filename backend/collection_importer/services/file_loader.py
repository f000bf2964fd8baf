"""
Reading and parsing of uploaded export files (JSON, falling back to YAML).
"""
import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Protocol

import yaml  # type: ignore

from collection_importer.config import settings
from collection_importer.core.errors import ImportParseError

logger = logging.getLogger(__name__)


class AsyncReadable(Protocol):
    async def read(self) -> bytes | str: ...


class _CoreSchemaLoader(yaml.SafeLoader):
    """Safe loader resolving plain scalars with the YAML 1.2 core schema.

    Only ``true``/``false``, ``null``/``~``, decimal, ``0o`` and ``0x``
    integers and floats are typed; ``yes``, ``on``, ``12:30``, ``017`` and
    dates stay strings (or decimal ints) as written.
    """

    yaml_implicit_resolvers: dict = {}


def _construct_core_int(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> int:
    value = loader.construct_scalar(node)
    if value.startswith("0o"):
        return int(value[2:], 8)
    if value.startswith("0x"):
        return int(value[2:], 16)
    return int(value)


_CoreSchemaLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
_CoreSchemaLoader.add_implicit_resolver(
    "tag:yaml.org,2002:int",
    re.compile(r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)
_CoreSchemaLoader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(
        r"^(?:[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?"
        r"|[-+]?\.(?:inf|Inf|INF)|\.(?:nan|NaN|NAN))$"
    ),
    list("-+.0123456789"),
)
_CoreSchemaLoader.add_implicit_resolver(
    "tag:yaml.org,2002:null",
    re.compile(r"^(?:~|null|Null|NULL|)$"),
    ["~", "n", "N", ""],
)
_CoreSchemaLoader.add_constructor("tag:yaml.org,2002:int", _construct_core_int)


def is_accepted_file(filename: str | None, content_type: str | None = None) -> bool:
    """Apply the import picker filter (extension or MIME type)."""
    if filename and filename.lower().endswith(settings.import_extensions):
        return True
    if content_type:
        return content_type.split(";")[0].strip().lower() in settings.import_mime_types
    return False


async def read_upload(source: AsyncReadable | str | Path) -> str:
    """Read the whole text of an upload or a local file.

    I/O errors propagate unchanged; undecodable bytes are a parse error.
    """
    if isinstance(source, (str, Path)):
        content: bytes | str = await asyncio.to_thread(Path(source).read_bytes)
    else:
        content = await source.read()

    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ImportParseError() from e


def parse_document(text: str) -> Any:
    """Parse ``text`` as JSON, or as YAML when it is not valid JSON."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as json_error:
        try:
            return yaml.load(text, Loader=_CoreSchemaLoader)  # noqa: S506
        except yaml.YAMLError as yaml_error:
            logger.debug("Error parsing the file: %s / %s", json_error, yaml_error)
            raise ImportParseError() from yaml_error


async def load_document(source: AsyncReadable | str | Path) -> Any:
    text = await read_upload(source)
    return parse_document(text)
