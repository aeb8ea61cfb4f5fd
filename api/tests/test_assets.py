"""
Tests for the image asset store
"""
import io

import httpx
import pytest
from fastapi import UploadFile

from tourbook.exceptions import AssetStoreError
from tourbook.services.assets import (
    CloudinaryAssetStore,
    ReleaseStatus,
    public_id_from_url,
    release_all,
)

from conftest import FakeAssetStore


def upload(name="beach.jpg", content=b"\xff\xd8\xff"):
    return UploadFile(file=io.BytesIO(content), filename=name)


def cloudinary(handler):
    return CloudinaryAssetStore(
        cloud_name="demo",
        api_key="key",
        api_secret="secret",
        folder="tours",
        transport=httpx.MockTransport(handler),
    )


class TestPublicIdFromUrl:
    def test_versioned_url_with_folder(self):
        url = "https://res.cloudinary.com/demo/image/upload/v1742949786/tours/abc.jpg"
        assert public_id_from_url(url) == "tours/abc"

    def test_url_without_version(self):
        url = "https://res.cloudinary.com/demo/image/upload/abc.png"
        assert public_id_from_url(url) == "abc"


class TestCloudinaryAssetStore:
    async def test_store_returns_secure_url(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = request.content
            return httpx.Response(200, json={
                "public_id": "tours/beach",
                "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/tours/beach.jpg",
            })

        url = await cloudinary(handler).store(upload())

        assert url == "https://res.cloudinary.com/demo/image/upload/v1/tours/beach.jpg"
        assert seen["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
        assert b"signature" in seen["body"]

    async def test_store_error_is_reported(self):
        store = cloudinary(lambda request: httpx.Response(500, json={"error": "boom"}))

        with pytest.raises(AssetStoreError):
            await store.store(upload())

    async def test_store_requires_credentials(self):
        store = CloudinaryAssetStore(cloud_name="", api_key="", api_secret="")
        if store.is_configured:
            pytest.skip("Cloudinary credentials present in environment")

        with pytest.raises(AssetStoreError):
            await store.store(upload())

    @pytest.mark.parametrize("result, status", [
        ("ok", ReleaseStatus.SUCCESS),
        ("not found", ReleaseStatus.NOT_FOUND),
        ("error", ReleaseStatus.FAILURE),
    ])
    async def test_release_maps_destroy_result(self, result, status):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"result": result})

        url = "https://res.cloudinary.com/demo/image/upload/v123/tours/beach.jpg"
        released = await cloudinary(handler).release(url)

        assert released.status == status
        assert released.reference == url
        assert str(requests[0].url).endswith("/image/destroy")
        assert b"public_id=tours%2Fbeach" in requests[0].content

    async def test_release_transport_error_is_a_failure(self):
        def handler(request):
            raise httpx.ConnectError("unreachable")

        released = await cloudinary(handler).release("https://res.cloudinary.com/x/image/upload/a.jpg")

        assert released.status == ReleaseStatus.FAILURE
        assert not released.ok


class TestReleaseAll:
    async def test_mixed_outcomes_never_raise(self):
        store = FakeAssetStore()
        store.missing.add("b")
        store.failing.add("c")

        results = await release_all(store, ["a", "b", "c", None, ""])

        assert [r.status for r in results] == [
            ReleaseStatus.SUCCESS,
            ReleaseStatus.NOT_FOUND,
            ReleaseStatus.FAILURE,
        ]
        assert store.released == ["a", "b", "c"]

    async def test_exception_from_store_becomes_failure(self):
        class ExplodingStore(FakeAssetStore):
            async def release(self, reference):
                raise RuntimeError("network down")

        (result,) = await release_all(ExplodingStore(), ["a"])

        assert result.status == ReleaseStatus.FAILURE
        assert "network down" in result.error_message


class TestStoreAll:
    async def test_partial_failure_releases_stored_uploads(self):
        class FlakyStore(FakeAssetStore):
            async def store(self, upload):
                if upload.filename == "bad.jpg":
                    raise AssetStoreError("Error uploading image")
                return await super().store(upload)

        store = FlakyStore()
        with pytest.raises(AssetStoreError):
            await store.store_all([upload("one.jpg"), upload("bad.jpg"), upload("two.jpg")])

        assert len(store.stored) == 2
        assert sorted(store.released) == sorted(store.stored)

    async def test_order_is_preserved(self):
        store = FakeAssetStore()
        urls = await store.store_all([upload("one.jpg"), upload("two.jpg")])

        assert [u.rsplit("/", 1)[-1] for u in urls] == ["one.jpg", "two.jpg"]
