# tests/test_photo_source.py
import httpx
import pytest

from services.errors import UpstreamError
from services.photo_source import MAX_PAGE_SIZE, PicsumClient

from conftest import make_listing

BASE_URL = "https://photos.test/v2"


def _client(handler):
    return PicsumClient(base_url=BASE_URL, timeout=5, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_list_photos_returns_listing():
    listing = make_listing([("Paul Jarvis", 3)])
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=listing)

    photos = await _client(handler).list_photos()

    assert photos == listing
    assert len(requests) == 1
    assert str(requests[0].url) == f"{BASE_URL}/list"

@pytest.mark.asyncio
async def test_list_photos_sends_paging_params():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json=[])

    await _client(handler).list_photos(page=4, limit=12)

    assert seen == {"page": "4", "limit": "12"}

@pytest.mark.asyncio
async def test_list_photos_caps_limit():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json=[])

    await _client(handler).list_photos(page=1, limit=1000)

    assert seen["limit"] == str(MAX_PAGE_SIZE)

@pytest.mark.asyncio
async def test_list_photos_http_error_is_upstream_error():
    def handler(request):
        return httpx.Response(503, text="unavailable")

    with pytest.raises(UpstreamError) as excinfo:
        await _client(handler).list_photos()

    assert excinfo.value.status_code == 500
    assert excinfo.value.to_dict()["message"] == "Error fetching photos from Picsum API."
    assert "503" in excinfo.value.to_dict()["error"]

@pytest.mark.asyncio
async def test_list_photos_transport_error_is_upstream_error():
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(UpstreamError) as excinfo:
        await _client(handler).list_photos()

    assert excinfo.value.to_dict()["error"] == "Connection refused"

@pytest.mark.asyncio
async def test_list_photos_invalid_json_is_upstream_error():
    def handler(request):
        return httpx.Response(200, text="<html>not json</html>")

    with pytest.raises(UpstreamError):
        await _client(handler).list_photos()

@pytest.mark.asyncio
async def test_list_photos_unexpected_shape_is_upstream_error():
    def handler(request):
        return httpx.Response(200, json={"photos": []})

    with pytest.raises(UpstreamError) as excinfo:
        await _client(handler).list_photos()

    assert excinfo.value.to_dict()["error"] == "Unexpected response shape"
