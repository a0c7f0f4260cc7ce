import json
from datetime import datetime

import httpx
import pytest

from es_importer import (BackendError, ElasticsearchBackend,
                         ResourceNotFoundError, Settings)
from es_importer.backend import bulk_body


def make_backend(handler, **overrides):
    options = {"es_url": "http://es.test:9200", "max_retries": 2, "backoff_factor": 0.001,
               "backoff_max": 0.001}
    options.update(overrides)
    return ElasticsearchBackend(Settings(**options), transport=httpx.MockTransport(handler))


class TestRequests:
    def test_index_one_puts_document(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"result": "created"})

        with make_backend(handler, api_key="secret") as backend:
            response = backend.index_one("users", "1-2024/01", {"at": datetime(2024, 1, 2)})

        assert response == {"result": "created"}
        request = seen[0]
        assert request.method == "PUT"
        assert request.url.raw_path == b"/users/_doc/1-2024%2F01"
        assert request.headers["Authorization"] == "ApiKey secret"
        assert json.loads(request.content) == {"at": "2024-01-02T00:00:00"}

    def test_empty_id_lets_backend_assign(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"result": "created"})

        with make_backend(handler) as backend:
            backend.index_one("users", "", {"a": 1})
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/users/_doc"

    def test_index_batch_sends_ndjson(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"errors": False, "items": []})

        with make_backend(handler, refresh=True) as backend:
            backend.index_batch("users", [("1", {"a": 1}), ("2", {"a": 2})])

        request = seen[0]
        assert request.url.path == "/users/_bulk"
        assert request.url.params["refresh"] == "true"
        assert request.headers["Content-Type"] == "application/x-ndjson"
        lines = request.content.decode().splitlines()
        assert [json.loads(line) for line in lines] == [
            {"index": {"_id": "1"}},
            {"a": 1},
            {"index": {"_id": "2"}},
            {"a": 2},
        ]

    def test_create_and_delete(self):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            return httpx.Response(200, json={"acknowledged": True})

        with make_backend(handler) as backend:
            backend.create_collection("users", {"mappings": {}})
            backend.delete_collection("users")
        assert seen == [("PUT", "/users"), ("DELETE", "/users")]

    def test_basic_auth(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        with make_backend(handler, username="elastic", password="pw") as backend:
            backend.delete_collection("users")
        assert seen[0].headers["Authorization"].startswith("Basic ")

    def test_requires_open_client(self):
        backend = make_backend(lambda request: httpx.Response(200, json={}))
        with pytest.raises(RuntimeError):
            backend.delete_collection("users")


class TestFailures:
    def test_client_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json={"error": "mapper_parsing_exception"})

        with make_backend(handler) as backend:
            with pytest.raises(BackendError) as excinfo:
                backend.index_one("users", "1", {})
        assert len(calls) == 1
        assert excinfo.value.status_code == 400
        assert "mapper_parsing_exception" in str(excinfo.value)

    def test_not_found(self):
        with make_backend(lambda request: httpx.Response(404, json={})) as backend:
            with pytest.raises(ResourceNotFoundError):
                backend.delete_collection("missing")

    def test_server_error_is_retried(self):
        responses = [httpx.Response(503), httpx.Response(200, json={"acknowledged": True})]

        with make_backend(lambda request: responses.pop(0)) as backend:
            assert backend.delete_collection("users") == {"acknowledged": True}
        assert responses == []

    def test_gives_up_after_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502)

        with make_backend(handler, max_retries=1) as backend:
            with pytest.raises(BackendError):
                backend.delete_collection("users")
        assert len(calls) == 2

    def test_network_error_is_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with make_backend(handler, max_retries=0) as backend:
            with pytest.raises(BackendError):
                backend.index_batch("users", [])


def test_bulk_body_without_id():
    lines = bulk_body([("", {"a": 1})]).decode().splitlines()
    assert json.loads(lines[0]) == {"index": {}}


def test_unencodable_bulk_body_raises_backend_error():
    body = {"a": 1}
    body["self"] = body
    with pytest.raises(BackendError):
        bulk_body([("1", body)])
