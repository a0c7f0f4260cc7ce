"""Shared fixtures: a recording backend and a users collection."""

from typing import Any, Dict, List, Tuple

import pytest

from es_importer import (BackendError, Descriptor, DocumentConverter,
                         DocumentImporter, Registry, ValueConverter)


class RecordingBackend:
    """In-memory stand-in for the search backend."""

    def __init__(self, fail_ids=()):
        self.fail_ids = set(fail_ids)
        self.created: List[Tuple[str, Dict[str, Any]]] = []
        self.deleted: List[str] = []
        self.indexed: List[Tuple[str, str, Dict[str, Any]]] = []
        self.batches: List[Tuple[str, list]] = []

    def create_collection(self, name, payload):
        self.created.append((name, payload))
        return {"acknowledged": True, "index": name}

    def delete_collection(self, name):
        self.deleted.append(name)
        return {"acknowledged": True}

    def index_one(self, collection, document_id, body):
        if document_id in self.fail_ids:
            raise BackendError(f"mapper_parsing_exception for {document_id}", 400)
        self.indexed.append((collection, document_id, body))
        return {"result": "created", "_id": document_id}

    def index_batch(self, collection, items):
        self.batches.append((collection, list(items)))
        return {
            "errors": False,
            "items": [{"index": {"_id": doc_id, "status": 201}} for doc_id, _ in items],
        }


@pytest.fixture
def users_descriptor():
    return Descriptor(
        identity_key=["user_id", "created_at"],
        mapping={
            "user_id": "text",
            "active": "boolean",
            "email": "text",
            "created_at": "date",
            "country_code": "text",
        },
        keywords={"country_code"},
        converters={
            "email": ValueConverter(str.lower),
            "friends.US": ValueConverter(lambda names: names + ["marry"]),
            "emails": DocumentConverter(lambda doc: [doc["email"]]),
            "profile.emails": DocumentConverter(lambda doc: [doc["email"]]),
        },
    )


@pytest.fixture
def registry(users_descriptor):
    registry = Registry()
    registry.register("users", users_descriptor)
    return registry


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def importer(registry, backend):
    return DocumentImporter(registry, backend)


def make_user(i, **extra):
    user = {
        "user_id": i,
        "created_at": "today",
        "active": True,
        "email": "USER_1@example.com",
        "country_code": "US",
        "friends": {"US": ["joe"]},
    }
    user.update(extra)
    return user


@pytest.fixture(name="make_user")
def make_user_fixture():
    return make_user
