"""
Tests voor de /api/rerank client.
"""
import httpx
import pytest

from conftest import BASE_URL, json_route, request_json
from direct_rerank_client import rerank_direct
from rerank_errors import PermanentAPIError, ProtocolError, TransientNetworkError


async def _rerank(client, documents=("doc a", "doc b", "doc c"), top_k=2):
    return await rerank_direct(client, BASE_URL, "bge-m3", "query", list(documents), top_k, 5000)


@pytest.mark.asyncio
async def test_returns_hits_and_sends_payload(make_backend):
    backend = make_backend({"/api/rerank": json_route({
        "model": "bge-m3",
        "results": [
            {"index": 2, "document": "doc c", "relevance_score": 0.91},
            {"index": 0, "document": "doc a", "relevance_score": 0.42},
        ],
    })})

    hits = await _rerank(backend.client())

    assert [(h.index, h.relevance_score) for h in hits] == [(2, 0.91), (0, 0.42)]
    assert request_json(backend.calls[0]) == {
        "model": "bge-m3",
        "query": "query",
        "documents": ["doc a", "doc b", "doc c"],
        "top_k": 2,
    }


@pytest.mark.asyncio
async def test_missing_results_is_protocol_error(make_backend):
    backend = make_backend({"/api/rerank": json_route({"model": "bge-m3"})})

    with pytest.raises(ProtocolError, match="Invalid response from Custom Rerank API"):
        await _rerank(backend.client())


@pytest.mark.asyncio
async def test_results_not_a_list_is_protocol_error(make_backend):
    backend = make_backend({"/api/rerank": json_route({"results": {"index": 0}})})

    with pytest.raises(ProtocolError):
        await _rerank(backend.client())


@pytest.mark.asyncio
async def test_malformed_hit_is_protocol_error(make_backend):
    backend = make_backend({"/api/rerank": json_route({"results": [{"index": 0}]})})

    with pytest.raises(ProtocolError, match="Malformed rerank result"):
        await _rerank(backend.client())


@pytest.mark.asyncio
async def test_index_out_of_range_is_protocol_error(make_backend):
    backend = make_backend({"/api/rerank": json_route({"results": [{"index": 7, "relevance_score": 0.5}]})})

    with pytest.raises(ProtocolError, match="out of range"):
        await _rerank(backend.client())


@pytest.mark.asyncio
async def test_invalid_json_is_protocol_error(make_backend):
    backend = make_backend({"/api/rerank": lambda r: httpx.Response(200, content=b"not json")})

    with pytest.raises(ProtocolError):
        await _rerank(backend.client())


@pytest.mark.asyncio
async def test_endpoint_missing(make_backend):
    backend = make_backend()

    with pytest.raises(PermanentAPIError) as exc_info:
        await _rerank(backend.client())

    assert exc_info.value.status_code == 404
    assert "endpoint not found" in str(exc_info.value)


@pytest.mark.asyncio
async def test_server_error_is_not_retried(make_backend):
    backend = make_backend({"/api/rerank": lambda r: httpx.Response(503, text="overloaded")})

    with pytest.raises(TransientNetworkError) as exc_info:
        await _rerank(backend.client())

    assert len(backend.calls) == 1
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_connection_error(make_backend):
    def route(request):
        raise httpx.ConnectError("refused", request=request)

    backend = make_backend({"/api/rerank": route})

    with pytest.raises(TransientNetworkError):
        await _rerank(backend.client())
