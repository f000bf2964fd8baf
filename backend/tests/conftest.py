"""Shared fixtures: builders for Insomnia export documents."""

import pytest


@pytest.fixture
def workspace():
    return {"_id": "wrk_1", "_type": "workspace", "parentId": None, "name": "My API"}


@pytest.fixture
def make_request():
    def _make(_id, parent_id="wrk_1", name="Request", **fields):
        resource = {
            "_id": _id,
            "_type": "request",
            "parentId": parent_id,
            "name": name,
            "method": "GET",
            "url": "https://example.com",
        }
        resource.update(fields)
        return resource

    return _make


@pytest.fixture
def make_group():
    def _make(_id, parent_id="wrk_1", name="Folder"):
        return {"_id": _id, "_type": "request_group", "parentId": parent_id, "name": name}

    return _make


@pytest.fixture
def make_environment():
    def _make(_id, parent_id="wrk_1", name="Base Environment", data=None):
        return {
            "_id": _id,
            "_type": "environment",
            "parentId": parent_id,
            "name": name,
            "data": data if data is not None else {},
        }

    return _make


@pytest.fixture
def minimal_export(workspace, make_group, make_request, make_environment):
    """One workspace, an "Auth" folder with a basic-auth login request and one environment."""
    return {
        "_type": "export",
        "__export_format": 4,
        "resources": [
            workspace,
            make_group("fld_auth", name="Auth"),
            make_request(
                "req_login",
                parent_id="fld_auth",
                name="Login",
                url="{{ base_url }}/login",
                authentication={"type": "basic", "username": "{{ _.user }}", "password": "secret"},
            ),
            make_environment("env_base", data={"token": "x"}),
        ],
    }
