import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_SECRET"] = "test-secret"
os.environ["DEBUG"] = "false"
os.environ["MAP_TOKEN"] = "test-token"

from urllib.parse import unquote

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from marketplace.database import Base, engine, SessionLocal
from marketplace.errors import ExternalServiceError
from marketplace.main import app
from marketplace.schemas import ListingPayload
from marketplace.services.auth import AuthService
from marketplace.services.geocoding import MapboxGeocoder, get_geocoder
from marketplace.services.image_storage import StoredImage, get_image_storage

KNOWN_PLACES = {
    "goa": [73.8278, 15.4909],
    "manali": [77.1892, 32.2432],
    "paris": [2.3522, 48.8566],
}


def mapbox_handler(request: httpx.Request) -> httpx.Response:
    """Имитирует ответ Mapbox: находит только известные места"""
    query = unquote(request.url.path.rsplit("/", 1)[-1]).removesuffix(".json")
    location = query.split(",")[0].strip().lower()
    coordinates = KNOWN_PLACES.get(location)
    if coordinates is None:
        return httpx.Response(200, json={"type": "FeatureCollection", "features": []})
    return httpx.Response(200, json={
        "type": "FeatureCollection",
        "features": [{"place_name": query, "geometry": {"type": "Point", "coordinates": coordinates}}],
    })


class FakeImageStorage:
    """Хранилище изображений в памяти вместо Cloudinary"""

    def __init__(self):
        self.uploaded = []
        self.destroyed = []
        self.fail_destroy = False

    def upload(self, file):
        filename = f"marketplace_DEV/image{len(self.uploaded) + 1}"
        self.uploaded.append(filename)
        return StoredImage(url=f"https://res.cloudinary.com/demo/image/upload/{filename}.jpg", filename=filename)

    def destroy(self, filename):
        if self.fail_destroy:
            raise ExternalServiceError("Image delete failed")
        self.destroyed.append(filename)


class BrokenSession:
    """Сессия, у которой недоступна БД"""

    def __init__(self):
        self.rolled_back = False

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is down"))

    query = _fail
    get = _fail

    def rollback(self):
        self.rolled_back = True


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def geocoder():
    client = httpx.Client(transport=httpx.MockTransport(mapbox_handler))
    geocoder = MapboxGeocoder("test-token", client=client)
    yield geocoder
    geocoder.close()


@pytest.fixture
def image_storage():
    return FakeImageStorage()


@pytest.fixture
def client(geocoder, image_storage):
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    app.dependency_overrides[get_image_storage] = lambda: image_storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(username="ann1", email=None, password="secret1"):
        return AuthService(db).signup(username, email or f"{username}@x.com", password)
    return _make


@pytest.fixture
def listing_payload():
    def _payload(**overrides):
        data = {
            "title": "Beach house",
            "description": "A cosy house right on the beach.",
            "price": 1500,
            "location": "Goa",
            "country": "India",
        }
        data.update(overrides)
        return ListingPayload(**data)
    return _payload


def login(client, username="ann1", password="secret1"):
    return client.post("/login", data={"username": username, "password": password}, follow_redirects=False)


def listing_form(**overrides):
    data = {
        "title": "Beach house",
        "description": "A cosy house right on the beach.",
        "price": "1500",
        "location": "Goa",
        "country": "India",
    }
    data.update(overrides)
    return data


IMAGE_FILE = {"image": ("photo.jpg", b"\xff\xd8\xff\xe0fake-jpeg", "image/jpeg")}
