import json

import pytest
import yaml

from collection_importer.core.errors import (
    CollectionSchemaError,
    ImportFailedError,
    ImportParseError,
    ImportStructureError,
)
from collection_importer.schemas.collection import Collection
from collection_importer.services.pipeline import import_collection, run_downstream, summarize


class FakeUpload:
    def __init__(self, content: bytes):
        self.content = content

    async def read(self):
        return self.content


class BrokenUpload:
    async def read(self):
        raise OSError("connection reset")


async def test_import_collection_from_json_upload(minimal_export):
    result = await import_collection(FakeUpload(json.dumps(minimal_export).encode()))

    collection = result.collection
    assert collection.name == "My API"
    request_node = collection.items[0].items[0]
    assert request_node.seq == 1
    assert request_node.request.method == "GET"
    assert collection.environments[0].variables[0].value == "x"


async def test_import_collection_from_yaml_file(tmp_path, minimal_export):
    path = tmp_path / "export.yaml"
    path.write_text(yaml.safe_dump(minimal_export), encoding="utf-8")

    result = await import_collection(path)

    assert result.collection.items[0].name == "Auth"


async def test_import_collection_parse_error_is_not_wrapped():
    with pytest.raises(ImportParseError):
        await import_collection(FakeUpload(b"{ resources: ["))


async def test_import_collection_structure_error_is_not_wrapped():
    with pytest.raises(ImportStructureError, match="no workspace found"):
        await import_collection(FakeUpload(b'{"resources": []}'))


async def test_import_collection_wraps_read_errors():
    with pytest.raises(ImportFailedError, match="Import collection failed: connection reset") as exc_info:
        await import_collection(BrokenUpload())

    assert isinstance(exc_info.value.__cause__, OSError)


async def test_import_collection_wraps_downstream_errors(minimal_export):
    def failing_stage(collection):
        raise CollectionSchemaError("items[0].name is required")

    with pytest.raises(ImportFailedError) as exc_info:
        await import_collection(FakeUpload(json.dumps(minimal_export).encode()), stages=[failing_stage])

    assert exc_info.value.message == "Import collection failed: items[0].name is required"


def test_run_downstream_applies_stages_in_order():
    calls = []

    def stage(label):
        def _stage(collection):
            calls.append(label)
            return collection.model_copy(update={"name": collection.name + label})
        return _stage

    result = run_downstream(Collection(name="c"), [stage("1"), stage("2"), stage("3")])

    assert calls == ["1", "2", "3"]
    assert result.name == "c123"


async def test_summarize(workspace, make_group, make_request, make_environment):
    export = {"resources": [
        workspace,
        make_group("fld_1"),
        make_group("fld_2", parent_id="fld_1"),
        make_request("req_1", parent_id="fld_2"),
        make_request("req_2", body={"mimeType": "application/graphql", "text": "{}"}),
        make_environment("env_1", name="Base", data={"a": 1, "b": {"c": 2}}),
    ]}

    result = await import_collection(FakeUpload(json.dumps(export).encode()))

    assert summarize(result.collection) == {
        "name": "My API",
        "total_folders": 2,
        "total_requests": 2,
        "total_graphql_requests": 1,
        "environments": [{"name": "Base", "variables_count": 2}],
    }
