"""
Capability Detector - bepaalt welk rerank protocol een backend spreekt.

Probe volgorde (eerste match wint):
1. GET  /api/status  → has_classifier → vl-classifier
2. GET  /api/tags    → bereikbaar     → generate (Ollama)
3. POST /api/rerank  → bereikbaar     → direct
4. default           → generate

Elke probe heeft een vaste korte timeout (CAPABILITY_PROBE_TIMEOUT),
los van de request timeout van de echte rerank call. Resultaten worden
niet gecached: de server status kan tussen calls veranderen.
"""

from __future__ import annotations

import logging

import httpx
import pydantic

from config.rerank_settings import CAPABILITY_PROBE_TIMEOUT, get_ollama_endpoint
from rerank_schemas import ApiType, ServerCapabilities

logger = logging.getLogger(__name__)

RERANK_PROBE_PAYLOAD = {
    "model": "probe",
    "query": "probe",
    "documents": ["probe"],
    "top_k": 1,
}


async def check_server_status(
    client: httpx.AsyncClient,
    base_url: str,
    timeout: float = CAPABILITY_PROBE_TIMEOUT,
) -> ServerCapabilities:
    """
    Haal server capabilities op via GET /api/status.

    Returns:
        ServerCapabilities; elke fout (ook 404) → status 'error' zonder capabilities
    """
    endpoint = get_ollama_endpoint("/api/status", base_url)
    try:
        resp = await client.get(endpoint, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"expected JSON object, got {type(data).__name__}")

        models = data.get("models") or []
        vram = data.get("vram_usage")
        version = data.get("version")
        capabilities = ServerCapabilities(
            status=str(data.get("status") or "error"),
            # Alleen een echte JSON true telt, "false" is geen capability
            has_classifier=data.get("has_classifier") is True,
            has_reranker=data.get("has_reranker") is True,
            models_loaded=[str(m) for m in models] if isinstance(models, list) else [],
            vram_usage=float(vram) if isinstance(vram, (int, float)) and not isinstance(vram, bool) else None,
            version=str(version) if version is not None else None,
        )
    except (httpx.HTTPError, pydantic.ValidationError, ValueError) as e:
        logger.debug(f"[Capabilities] Status check failed on {endpoint}: {e}")
        return ServerCapabilities(status="error", has_classifier=False, has_reranker=False)

    logger.info(
        f"[Capabilities] {base_url}: status={capabilities.status}, "
        f"classifier={capabilities.has_classifier}, reranker={capabilities.has_reranker}"
    )
    return capabilities


async def _probe_ok(client: httpx.AsyncClient, method: str, url: str, timeout: float, **kwargs) -> bool:
    try:
        resp = await client.request(method, url, timeout=timeout, **kwargs)
        resp.raise_for_status()
        return True
    except httpx.HTTPError as e:
        logger.debug(f"[Capabilities] Probe {method} {url} failed: {e}")
        return False


async def detect_api_type(
    client: httpx.AsyncClient,
    base_url: str,
    timeout: float = CAPABILITY_PROBE_TIMEOUT,
) -> ApiType:
    """
    Detecteer welk rerank protocol de backend ondersteunt.

    Returns:
        ApiType.VL_CLASSIFIER, ApiType.GENERATE of ApiType.DIRECT
    """
    status = await check_server_status(client, base_url, timeout=timeout)
    if status.has_classifier:
        logger.info(f"[Capabilities] {base_url} → vl-classifier")
        return ApiType.VL_CLASSIFIER

    if await _probe_ok(client, "GET", get_ollama_endpoint("/api/tags", base_url), timeout):
        logger.info(f"[Capabilities] {base_url} → generate (Ollama /api/tags)")
        return ApiType.GENERATE

    if await _probe_ok(
        client, "POST", get_ollama_endpoint("/api/rerank", base_url), timeout, json=RERANK_PROBE_PAYLOAD
    ):
        logger.info(f"[Capabilities] {base_url} → direct (/api/rerank)")
        return ApiType.DIRECT

    logger.warning(f"[Capabilities] No probe matched for {base_url}, defaulting to generate")
    return ApiType.GENERATE
