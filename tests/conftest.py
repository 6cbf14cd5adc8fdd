"""
Shared test fixtures.
"""
import pytest
from fastapi.testclient import TestClient

from fileservice.api.config import settings
from fileservice.api.dependencies import get_object_store_factory, get_relational_client_factory
from fileservice.api.import_progress import ImportJobRegistry
from fileservice.api.local_storage import LocalFileStore
from fileservice.api.main import create_app

from .fakes import FakeObjectStore, FakeRelationalClient


@pytest.fixture
def registry() -> ImportJobRegistry:
    return ImportJobRegistry()


@pytest.fixture
def local_store(tmp_path) -> LocalFileStore:
    return LocalFileStore(tmp_path / "storage")


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore(
        {
            "a.txt": b"alpha",
            "dir/b.txt": b"bravo",
            "dir/c.txt": b"charlie",
        }
    )


@pytest.fixture
def relational_client() -> FakeRelationalClient:
    return FakeRelationalClient(
        tables={
            "public.users": (["id", "name"], [(1, "Ada"), (2, "Grace")]),
            "sales.orders": (["id", "total"], [(10, 9.5)]),
        },
        views={"public": ["active_users"]},
    )


@pytest.fixture
def app(tmp_path, monkeypatch, object_store, relational_client):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    application = create_app()
    application.dependency_overrides[get_object_store_factory] = lambda: (lambda request: object_store)
    application.dependency_overrides[get_relational_client_factory] = lambda: (lambda request: relational_client)
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
