"""
Scoring Client - scoort één document via Ollama /api/generate.

Een reranker model krijgt een family-specifieke prompt en antwoordt met
vrije tekst; de family parser maakt daar een score tussen 0.0 en 1.0 van.

Retry beleid (alleen dit pad):
- max RERANK_MAX_RETRIES pogingen
- 400/404: direct stoppen
- timeout, netwerk fout, 5xx: opnieuw met backoff 100ms, 200ms, 400ms
- al het andere: direct stoppen
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from config.rerank_settings import (
    RERANK_MAX_RETRIES,
    RERANK_RETRY_BASE_MS,
    get_ollama_endpoint,
)
from model_families import RerankModelFamily, get_registry
from rerank_errors import BackendAPIError, PermanentAPIError, TransientNetworkError

logger = logging.getLogger(__name__)

PERMANENT_STATUS_CODES = (400, 404)


def is_transient_error(exc: BaseException) -> bool:
    """Timeout, transport fouten en 5xx zijn het opnieuw proberen waard."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status in PERMANENT_STATUS_CODES:
            return False
        return status >= 500
    return isinstance(exc, (httpx.TimeoutException, httpx.TransportError))


def backoff_wait(retry_base_ms: float = RERANK_RETRY_BASE_MS):
    """Wachttijd voor retry n (seconden): base, 2 x base, 4 x base, ..."""
    return wait_exponential(multiplier=retry_base_ms / 1000.0, exp_base=2)


def build_generate_payload(model: str, prompt: str) -> Dict[str, Any]:
    return {
        "model": model,
        "prompt": prompt,
        "stream": False,
        "options": {
            "temperature": 0.0,  # Deterministische scoring
        },
    }


async def score_document(
    client: httpx.AsyncClient,
    base_url: str,
    family: RerankModelFamily,
    model: str,
    query: str,
    document_content: str,
    instruction: str,
    timeout_ms: int,
    max_retries: int = RERANK_MAX_RETRIES,
    retry_base_ms: float = RERANK_RETRY_BASE_MS,
) -> float:
    """
    Scoor één document tegen de query.

    Args:
        client: Gedeelde AsyncClient voor deze rerank call
        base_url: Ollama base URL
        family: Vooraf opgeloste model family (prompt + parser)
        model: Model naam zoals Ollama hem kent
        timeout_ms: Timeout per poging

    Returns:
        Score tussen 0.0 en 1.0

    Raises:
        TransientNetworkError: Timeout/5xx na alle pogingen
        PermanentAPIError: 4xx (geen retry)
        BackendAPIError: Overige fouten (geen retry)
    """
    endpoint = get_ollama_endpoint("/api/generate", base_url)
    prompt = family.format_prompt(query, document_content, instruction)
    payload = build_generate_payload(model, prompt)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_retries),
        wait=backoff_wait(retry_base_ms),
        retry=retry_if_exception(is_transient_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )

    try:
        async for attempt in retrying:
            with attempt:
                resp = await client.post(endpoint, json=payload, timeout=timeout_ms / 1000.0)
                resp.raise_for_status()
                data = resp.json()
    except httpx.TimeoutException as e:
        attempts = retrying.statistics.get("attempt_number", max_retries)
        logger.error(f"[Scoring] Timeout on {endpoint} after {attempts} attempts: {e}")
        raise TransientNetworkError(
            f"Request timeout after {timeout_ms}ms (tried {attempts} times)",
            endpoint=endpoint,
            model=model,
            detail=str(e) or type(e).__name__,
            attempts=attempts,
        ) from e
    except httpx.HTTPStatusError as e:
        attempts = retrying.statistics.get("attempt_number", 1)
        status = e.response.status_code
        body = e.response.text[:500]
        logger.error(f"[Scoring] Ollama API error {status} on {endpoint}: {body}")
        error_cls = TransientNetworkError if status >= 500 else PermanentAPIError
        raise error_cls(
            f"Ollama API Error ({status})",
            endpoint=endpoint,
            model=model,
            status_code=status,
            detail=body,
            attempts=attempts,
        ) from e
    except httpx.TransportError as e:
        attempts = retrying.statistics.get("attempt_number", max_retries)
        logger.error(f"[Scoring] Connection error on {endpoint}: {e}")
        raise TransientNetworkError(
            f"Kan Ollama niet bereiken op {endpoint}",
            endpoint=endpoint,
            model=model,
            detail=str(e) or type(e).__name__,
            attempts=attempts,
        ) from e
    except ValueError as e:
        # Geen geldige JSON: backend praat een ander protocol
        logger.error(f"[Scoring] Invalid JSON from {endpoint}: {e}")
        raise BackendAPIError(
            "Ollama reranking request failed",
            endpoint=endpoint,
            model=model,
            detail=str(e),
        ) from e

    return get_registry().parse_response(family, data)
