"""
Tests voor server status en protocol detectie.
"""
import httpx
import pytest

from capability_detector import check_server_status, detect_api_type
from conftest import BASE_URL, json_route, request_json
from rerank_schemas import ApiType

STATUS = {
    "status": "healthy",
    "models": ["resnet18-onnx", "bge-m3"],
    "vram_usage": 2.5,
    "has_classifier": True,
    "has_reranker": True,
    "version": "2.1.0",
}


@pytest.mark.asyncio
async def test_status_is_parsed(make_backend):
    backend = make_backend({"/api/status": json_route(STATUS)})

    status = await check_server_status(backend.client(), BASE_URL)

    assert status.status == "healthy"
    assert status.has_classifier is True
    assert status.has_reranker is True
    assert status.models_loaded == ["resnet18-onnx", "bge-m3"]
    assert status.vram_usage == 2.5
    assert status.version == "2.1.0"


@pytest.mark.asyncio
async def test_status_not_found_is_error(make_backend):
    status = await check_server_status(make_backend().client(), BASE_URL)

    assert status.status == "error"
    assert status.has_classifier is False
    assert status.has_reranker is False


@pytest.mark.asyncio
async def test_status_connection_error(make_backend):
    def route(request):
        raise httpx.ConnectError("refused", request=request)

    status = await check_server_status(make_backend({"/api/status": route}).client(), BASE_URL)

    assert status.status == "error"


@pytest.mark.asyncio
async def test_status_non_object_is_error(make_backend):
    backend = make_backend({"/api/status": json_route(["healthy"])})

    status = await check_server_status(backend.client(), BASE_URL)

    assert status.status == "error"


@pytest.mark.asyncio
async def test_detect_classifier(make_backend):
    backend = make_backend({
        "/api/status": json_route(STATUS),
        "/api/tags": json_route({"models": []}),
    })

    assert await detect_api_type(backend.client(), BASE_URL) == ApiType.VL_CLASSIFIER
    # Classifier wint, tags wordt niet eens geprobeerd
    assert backend.calls_to("/api/tags") == []


@pytest.mark.asyncio
async def test_detect_ollama(make_backend):
    backend = make_backend({
        "/api/status": json_route({"status": "healthy", "has_classifier": False}),
        "/api/tags": json_route({"models": [{"name": "bge-reranker-v2-m3"}]}),
        "/api/rerank": json_route({"results": []}),
    })

    assert await detect_api_type(backend.client(), BASE_URL) == ApiType.GENERATE
    assert backend.calls_to("/api/rerank") == []


@pytest.mark.asyncio
async def test_detect_direct(make_backend):
    backend = make_backend({"/api/rerank": json_route({"results": []})})

    assert await detect_api_type(backend.client(), BASE_URL) == ApiType.DIRECT
    assert request_json(backend.calls_to("/api/rerank")[0])["top_k"] == 1


@pytest.mark.asyncio
async def test_detect_defaults_to_generate(make_backend):
    backend = make_backend()

    assert await detect_api_type(backend.client(), BASE_URL) == ApiType.GENERATE
    assert [c.url.path for c in backend.calls] == ["/api/status", "/api/tags", "/api/rerank"]


@pytest.mark.asyncio
async def test_detection_is_not_cached(make_backend):
    backend = make_backend({"/api/status": json_route(STATUS)})
    client = backend.client()

    await detect_api_type(client, BASE_URL)
    await detect_api_type(client, BASE_URL)

    assert len(backend.calls_to("/api/status")) == 2


@pytest.mark.asyncio
async def test_numeric_version_is_accepted(make_backend):
    backend = make_backend({"/api/status": json_route({"status": "healthy", "version": 2, "has_classifier": True})})

    status = await check_server_status(backend.client(), BASE_URL)

    assert status.status == "healthy"
    assert status.version == "2"
    assert status.has_classifier is True


@pytest.mark.asyncio
async def test_odd_status_payload_does_not_break_detection(make_backend):
    backend = make_backend({
        "/api/status": json_route({"status": "healthy", "version": {"major": 2}, "vram_usage": True}),
        "/api/tags": json_route({"models": []}),
    })

    status = await check_server_status(backend.client(), BASE_URL)

    assert status.version == "{'major': 2}"
    assert status.vram_usage is None
    assert await detect_api_type(backend.client(), BASE_URL) == ApiType.GENERATE


@pytest.mark.asyncio
async def test_string_booleans_are_not_capabilities(make_backend):
    backend = make_backend({
        "/api/status": json_route({"status": "healthy", "has_classifier": "false", "has_reranker": "true"}),
        "/api/tags": json_route({"models": []}),
    })

    status = await check_server_status(backend.client(), BASE_URL)

    assert status.has_classifier is False
    assert status.has_reranker is False
    assert await detect_api_type(backend.client(), BASE_URL) == ApiType.GENERATE
