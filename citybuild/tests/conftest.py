import pytest
from fastapi.testclient import TestClient

from citybuild.core.config import Settings
from citybuild.db.kv_backends import MemoryBackend
from citybuild.main import create_app
from citybuild.services.data_seeder import DataSeeder
from citybuild.services.local_storage import LocalStorageManager, LocalStore
from citybuild.services.mock_api import MockApi
from citybuild.services.repositories import Repositories


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        storage_backend="memory",
        mock_api_latency_scale=0,
        seed_on_startup=True,
        jwt_secret_key="test-secret",
    )


@pytest.fixture
def store():
    return LocalStore(LocalStorageManager(MemoryBackend()))


@pytest.fixture
def seeded_store(store):
    DataSeeder(store).seed_initial_data()
    return store


@pytest.fixture
def api(seeded_store, settings):
    return MockApi(Repositories.from_store(seeded_store), latency_scale=0, settings=settings)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login(client):
    def _login(email: str) -> dict:
        r = client.post("/api/v1/auth/login", json={"email": email, "password": "anything"})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _login
