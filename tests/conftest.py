import mongomock
import pytest
from fastapi.testclient import TestClient

import auth
from database import Storage
from main import create_app

SERVICE = {
    "name": "Test Retouch",
    "description": "Retouching used by the tests",
    "basic_price": 5.0,
    "medium_price": 7.5,
    "complex_price": 10.0,
    "super_complex_price": 15.0,
}


@pytest.fixture
def storage():
    store = Storage(mongomock.MongoClient()["photo_orders_test"])
    store.ensure_indexes()
    return store


@pytest.fixture
def service(storage):
    return storage.create_service(SERVICE)


@pytest.fixture
def customer(storage):
    return auth.register(storage, "carol", "secret")


@pytest.fixture
def editor(storage):
    return auth.register(storage, "eddie", "secret", role="editor")


@pytest.fixture
def admin(storage):
    return auth.register(storage, "ada", "secret", role="admin")


@pytest.fixture
def client(storage, service):
    with TestClient(create_app(storage)) as c:
        yield c


def login(client, username, password="secret"):
    res = client.post("/api/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.text
    return res.json()


def order_payload(service_id, /, **overrides):
    payload = {
        "service_id": service_id,
        "complexity": "basic",
        "order_name": "Spring catalog",
        "files": [{"path": "shoes.zip", "image_count": 3}, {"path": "https://example.com/bags", "image_count": 2}],
        "addons": [],
        "delivery_format": "jpg",
        "delivery_time": "24",
        "instructions": "Remove background, keep shadows",
    }
    payload.update(overrides)
    return payload
