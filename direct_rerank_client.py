"""
Direct Rerank Client - voor backends met een eigen /api/rerank endpoint.

Services zoals deposium-embeddings-turbov2 scoren alle documenten in één
request (bijv. cosine similarity) en geven direct relevance scores terug.
Geen retries: een fout hier betekent meestal dat de backend het protocol
niet spreekt, niet dat hij tijdelijk faalt.
"""

from __future__ import annotations

import json
import logging
from typing import List, Sequence

import httpx
import pydantic

from config.rerank_settings import get_ollama_endpoint
from rerank_errors import PermanentAPIError, ProtocolError, TransientNetworkError
from rerank_schemas import DirectRerankHit

logger = logging.getLogger(__name__)


async def rerank_direct(
    client: httpx.AsyncClient,
    base_url: str,
    model: str,
    query: str,
    documents: Sequence[str],
    top_k: int,
    timeout_ms: int,
) -> List[DirectRerankHit]:
    """
    Rerank documenten via POST /api/rerank.

    Args:
        documents: Document teksten, index in deze lijst = index in de response
        top_k: Hint voor de server; threshold filtering gebeurt client-side

    Returns:
        Hits zoals de server ze teruggeeft

    Raises:
        ProtocolError: Response zonder geldige 'results' lijst
        PermanentAPIError: 4xx (404 = endpoint bestaat niet)
        TransientNetworkError: Timeout, connectie fout of 5xx
    """
    endpoint = get_ollama_endpoint("/api/rerank", base_url)
    payload = {
        "model": model,
        "query": query,
        "documents": list(documents),
        "top_k": top_k,
    }

    logger.info(f"[DirectRerank] {len(documents)} documents → {endpoint} (model={model}, top_k={top_k})")

    try:
        resp = await client.post(endpoint, json=payload, timeout=timeout_ms / 1000.0)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        if status == 404:
            raise PermanentAPIError(
                "Custom Rerank API endpoint not found",
                endpoint=endpoint,
                model=model,
                status_code=status,
                detail=(
                    f"The /api/rerank endpoint was not found at {base_url}. "
                    "Make sure you're using a service that supports this endpoint."
                ),
            ) from e
        error_cls = TransientNetworkError if status >= 500 else PermanentAPIError
        raise error_cls(
            f"Custom Rerank API Error ({status})",
            endpoint=endpoint,
            model=model,
            status_code=status,
            detail=e.response.text[:500],
        ) from e
    except httpx.TimeoutException as e:
        raise TransientNetworkError(
            f"Request timeout after {timeout_ms}ms",
            endpoint=endpoint,
            model=model,
            detail=str(e) or type(e).__name__,
        ) from e
    except httpx.TransportError as e:
        raise TransientNetworkError(
            "Custom Rerank API request failed",
            endpoint=endpoint,
            model=model,
            detail=str(e) or type(e).__name__,
        ) from e
    except ValueError as e:
        raise ProtocolError(
            f"Invalid JSON from Custom Rerank API: {e}",
            endpoint=endpoint,
            model=model,
        ) from e

    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        raise ProtocolError(
            f"Invalid response from Custom Rerank API: expected {{results: [...]}} but got: {json.dumps(data)[:300]}",
            endpoint=endpoint,
            model=model,
        )

    hits: List[DirectRerankHit] = []
    for raw in results:
        try:
            hit = DirectRerankHit.model_validate(raw)
        except pydantic.ValidationError as e:
            raise ProtocolError(f"Malformed rerank result {raw!r}: {e}", endpoint=endpoint, model=model) from e
        if not 0 <= hit.index < len(documents):
            raise ProtocolError(
                f"Rerank result index {hit.index} out of range for {len(documents)} documents",
                endpoint=endpoint,
                model=model,
            )
        hits.append(hit)

    logger.info(f"[DirectRerank] Received {len(hits)} results from {data.get('model', model)}")
    return hits
