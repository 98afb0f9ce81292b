"""
Rerank Orchestrator - entry point van de rerank engine.

Kiest per call de strategie (generate / direct / vl-classifier, of auto
via capability detection), laat de documenten scoren en past daarna
het ranking beleid toe:

1. threshold: score >= threshold
2. sorteer aflopend op score, gelijke scores houden input volgorde
3. top_k
4. original_score alleen als include_original_scores

Of de hele call slaagt met een complete set scores, of hij faalt met
één fout. Alleen classificatie heeft een eigen default-bij-fout.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

import httpx

from batch_scheduler import score_in_waves
from capability_detector import check_server_status, detect_api_type
from complexity_classifier import (
    ClassifiedDocument,
    apply_classification_strategy,
    classify_documents,
    synthetic_score,
)
from config.rerank_settings import (
    OLLAMA_BASE_URL,
    RERANK_MAX_RETRIES,
    RERANK_RETRY_BASE_MS,
)
from direct_rerank_client import rerank_direct
from model_families import resolve_family
from rerank_errors import ValidationError
from rerank_schemas import (
    ApiType,
    ClassificationOptions,
    ClassificationResult,
    Document,
    RerankedDocument,
    RerankRequest,
    ServerCapabilities,
)
from scoring_client import score_document

logger = logging.getLogger(__name__)


@dataclass
class _Candidate:
    document: Document
    score: float
    classification: Optional[ClassificationResult] = None


def validate_request(request: RerankRequest) -> None:
    if not request.query or not request.query.strip():
        raise ValidationError("Query cannot be empty")
    if request.top_k < 1:
        raise ValidationError(f"top_k must be >= 1, got {request.top_k}")


def apply_ranking_policy(candidates: Sequence[_Candidate], threshold: float, top_k: int) -> List[_Candidate]:
    """
    Threshold (inclusief), stabiele aflopende sortering, top_k.

    candidates moeten in input volgorde binnenkomen; sorted() is stabiel
    dus bij gelijke score wint het eerst geziene document.
    """
    kept = [c for c in candidates if c.score >= threshold]
    ranked = sorted(kept, key=lambda c: c.score, reverse=True)
    return ranked[:top_k]


def build_output(candidate: _Candidate, include_original_scores: bool) -> RerankedDocument:
    document = candidate.document
    classification = candidate.classification
    return RerankedDocument(
        content=document.content,
        metadata=dict(document.metadata),
        original_index=document.original_index,
        rerank_score=candidate.score,
        original_score=document.original_score if include_original_scores else None,
        complexity_class=classification.complexity if classification else None,
        complexity_confidence=(classification.confidence or 0.0) if classification else None,
    )


class RerankOrchestrator:
    """
    Rerank engine voor één Ollama (of compatibele) backend.

    Gebruik:
        orchestrator = RerankOrchestrator("http://localhost:11434")
        ranked = await orchestrator.rerank(RerankRequest(query="...", documents=docs))
    """

    def __init__(
        self,
        base_url: str = OLLAMA_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        max_retries: int = RERANK_MAX_RETRIES,
        retry_base_ms: float = RERANK_RETRY_BASE_MS,
    ):
        self.base_url = base_url.rstrip('/')
        self._client = client
        self.max_retries = max_retries
        self.retry_base_ms = retry_base_ms

    async def rerank(self, request: RerankRequest) -> List[RerankedDocument]:
        """
        Rerank de documenten van een request.

        Raises:
            ValidationError: Lege query of top_k < 1 (geen backend calls)
            ProtocolError: Backend antwoordt in een verkeerde vorm
            BackendAPIError: Scoring of direct rerank gefaald
        """
        validate_request(request)

        if not request.documents:
            logger.debug("[Rerank] No documents to rerank, returning empty list")
            return []

        # Identity = positie in deze call
        documents = [
            doc if doc.original_index == i else doc.model_copy(update={"original_index": i})
            for i, doc in enumerate(request.documents)
        ]

        async with self._client_context() as client:
            return await self._rerank_with_client(client, request, documents)

    @asynccontextmanager
    async def _client_context(self) -> AsyncIterator[httpx.AsyncClient]:
        """Geïnjecteerde client hergebruiken, anders één client per call."""
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient() as client:
            yield client

    async def capabilities(self) -> Tuple[ApiType, ServerCapabilities]:
        """Vers gedetecteerd protocol plus server status."""
        async with self._client_context() as client:
            status = await check_server_status(client, self.base_url)
            api_type = await detect_api_type(client, self.base_url)
        return api_type, status

    async def _rerank_with_client(
        self,
        client: httpx.AsyncClient,
        request: RerankRequest,
        documents: List[Document],
    ) -> List[RerankedDocument]:
        start_time = time.time()

        api_type = request.api_type
        if api_type == ApiType.AUTO:
            api_type = await detect_api_type(client, self.base_url)

        logger.info(
            f"[Rerank] {len(documents)} documents via {api_type.value} "
            f"(model={request.model}, top_k={request.top_k}, threshold={request.threshold})"
        )

        if api_type == ApiType.DIRECT:
            candidates = await self._score_direct(client, request, documents)
        elif api_type == ApiType.VL_CLASSIFIER:
            candidates = await self._score_classified(client, request, documents)
        else:
            candidates = await self._score_generate(client, request, documents)

        ranked = apply_ranking_policy(candidates, request.threshold, request.top_k)
        results = [build_output(c, request.include_original_scores) for c in ranked]

        elapsed = time.time() - start_time
        logger.info(f"[Rerank] Complete: {len(results)}/{len(documents)} documents returned in {elapsed:.2f}s")
        return results

    async def _score_generate(
        self,
        client: httpx.AsyncClient,
        request: RerankRequest,
        documents: List[Document],
    ) -> List[_Candidate]:
        # Family één keer oplossen, niet per document
        family = resolve_family(request.model)

        async def score_fn(document: Document) -> float:
            return await score_document(
                client,
                self.base_url,
                family,
                request.model,
                request.query,
                document.content,
                request.instruction,
                request.timeout_ms,
                max_retries=self.max_retries,
                retry_base_ms=self.retry_base_ms,
            )

        scores = await score_in_waves(documents, score_fn, request.batch_size)
        return [_Candidate(documents[r.index], r.score) for r in scores]

    async def _score_direct(
        self,
        client: httpx.AsyncClient,
        request: RerankRequest,
        documents: List[Document],
        classifications: Optional[Dict[int, ClassificationResult]] = None,
    ) -> List[_Candidate]:
        hits = await rerank_direct(
            client,
            self.base_url,
            request.model,
            request.query,
            [doc.content for doc in documents],
            request.top_k,
            request.timeout_ms,
        )

        by_index: Dict[int, float] = {}
        for hit in hits:
            if hit.index in by_index:
                logger.warning(f"[Rerank] Duplicate index {hit.index} in rerank results, keeping first")
                continue
            by_index[hit.index] = hit.relevance_score

        # Terug naar input volgorde zodat gelijke scores stabiel blijven
        return [
            _Candidate(documents[i], by_index[i], (classifications or {}).get(i))
            for i in sorted(by_index)
        ]

    async def _score_classified(
        self,
        client: httpx.AsyncClient,
        request: RerankRequest,
        documents: List[Document],
    ) -> List[_Candidate]:
        options = request.classification
        if options is None or not options.enabled:
            options = ClassificationOptions()

        classifications = await classify_documents(
            client, self.base_url, documents, request.model, request.timeout_ms
        )
        survivors: List[ClassifiedDocument] = apply_classification_strategy(documents, classifications, options)
        if not survivors:
            logger.info("[Rerank] Classification filter removed all documents")
            return []

        capabilities = await check_server_status(client, self.base_url)
        if capabilities.has_reranker:
            survivor_docs = [s.document for s in survivors]
            attached = {
                i: s.classification for i, s in enumerate(survivors) if s.attach_metadata
            }
            return await self._score_direct(client, request, survivor_docs, attached)

        return [
            _Candidate(
                s.document,
                synthetic_score(s.classification),
                s.classification if s.attach_metadata else None,
            )
            for s in survivors
        ]


async def rerank(
    request: RerankRequest,
    base_url: str = OLLAMA_BASE_URL,
    client: Optional[httpx.AsyncClient] = None,
) -> List[RerankedDocument]:
    """Convenience: één rerank call zonder zelf een orchestrator te bouwen."""
    return await RerankOrchestrator(base_url, client=client).rerank(request)


def rerank_sync(request: RerankRequest, base_url: str = OLLAMA_BASE_URL) -> List[RerankedDocument]:
    """Sync wrapper voor code zonder event loop (CLI, scripts)."""
    return asyncio.run(rerank(request, base_url=base_url))


async def compress_documents(
    request: RerankRequest,
    base_url: str = OLLAMA_BASE_URL,
    client: Optional[httpx.AsyncClient] = None,
) -> List[Dict[str, Any]]:
    """
    LangChain-stijl document compressor.

    Zelfde ranking als rerank(), maar zonder helper velden (score, index):
    alleen pageContent en metadata.
    """
    ranked = await rerank(request, base_url=base_url, client=client)
    return [{"pageContent": doc.content, "metadata": doc.metadata} for doc in ranked]
