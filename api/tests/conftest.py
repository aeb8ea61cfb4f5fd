"""
Shared fixtures: in-memory MongoDB, a recording asset store and an HTTP client
bound to the app with dependencies overridden.
"""
import io
import json
from datetime import datetime

import pytest
from fastapi import UploadFile
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from tourbook.exceptions import AssetStoreError
from tourbook.main import app
from tourbook.models.category import Category, Subcategory
from tourbook.services.assets import AssetStore, ReleaseResult, ReleaseStatus, get_asset_store
from tourbook.utils.mongodb import CATEGORIES, create_indexes, get_mongodb
from tourbook.utils.redis import NoOpCache, get_redis


class FakeAssetStore(AssetStore):
    """Records every store/release call; outcomes can be scripted per reference"""

    name = "fake"

    def __init__(self):
        self.stored = []
        self.released = []
        self.missing = set()
        self.failing = set()
        self.fail_on_store = False

    async def store(self, upload):
        if self.fail_on_store:
            raise AssetStoreError("Error uploading image")
        await upload.read()
        url = f"https://assets.test/{len(self.stored)}/{upload.filename}"
        self.stored.append(url)
        return url

    async def release(self, reference):
        self.released.append(reference)
        if reference in self.failing:
            return ReleaseResult(reference, ReleaseStatus.FAILURE, "boom")
        if reference in self.missing:
            return ReleaseResult(reference, ReleaseStatus.NOT_FOUND)
        return ReleaseResult(reference, ReleaseStatus.SUCCESS)


class FailingCollection:
    """Delegates to a collection, except that one method raises `error`"""

    def __init__(self, collection, method, error):
        self._collection = collection
        self._method = method
        self._error = error

    def __getattr__(self, name):
        if name == self._method:
            async def fail(*args, **kwargs):
                raise self._error
            return fail
        return getattr(self._collection, name)


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    database = client["tourbook_test"]
    await create_indexes(database)
    return database


@pytest.fixture
def assets():
    return FakeAssetStore()


@pytest.fixture
async def client(db, assets):
    app.dependency_overrides[get_mongodb] = lambda: db
    app.dependency_overrides[get_asset_store] = lambda: assets
    app.dependency_overrides[get_redis] = lambda: NoOpCache()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_category(db):
    """Insert a category directly; returns the Category model"""
    async def _make(name, sub_names=(), is_active=True, inactive_subs=()):
        category = Category(
            name=name,
            image_url=f"https://assets.test/categories/{name}.jpg",
            is_active=is_active,
            sub_categories=[
                Subcategory(
                    name=sub,
                    image_url=f"https://assets.test/subcategories/{sub}.jpg",
                    is_active=sub not in inactive_subs,
                )
                for sub in sub_names
            ],
            created_at=datetime.utcnow(),
        )
        await db[CATEGORIES].insert_one(category.to_document())
        return category
    return _make


def image_files(count, name="photo"):
    return [("images", (f"{name}{i}.jpg", b"\xff\xd8\xff" + bytes([i]), "image/jpeg")) for i in range(count)]


def uploads(count, name="photo"):
    return [UploadFile(file=io.BytesIO(b"\xff\xd8\xff"), filename=f"{name}{i}.jpg") for i in range(count)]


def package_form(categories, sub_categories=(), **overrides):
    form = {
        "title": "Backwaters Escape",
        "destination": "Alleppey, Kerala",
        "duration": "3 Days / 2 Nights",
        "tour_type": "Family",
        "group_size": "6",
        "tour_guide": "Anil",
        "description": "Cruise the backwaters on a traditional houseboat and watch the sun set over the paddy fields.",
        "location_href": "https://maps.example.com/alleppey",
        "price": "14999",
        "categories": json.dumps([str(c) for c in categories]),
        "sub_categories": json.dumps([str(s) for s in sub_categories]),
        "included": json.dumps(["Houseboat stay", "All meals"]),
        "travel_plan": json.dumps([
            {"day": "Day 1", "description": "Check in to the houseboat"},
            {"day": "Day 2", "description": "Village walk"},
        ]),
    }
    form.update(overrides)
    return form


@pytest.fixture
def create_package(client):
    """Create a package through the admin API and return the response JSON"""
    async def _create(categories, sub_categories=(), images=2, **overrides):
        response = await client.post(
            "/admin/packages",
            data=package_form(categories, sub_categories, **overrides),
            files=image_files(images),
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _create
