from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException

from config.rerank_settings import (
    OLLAMA_BASE_URL,
    RERANK_MODEL,
    RERANKER_SERVICE_HOST,
    RERANKER_SERVICE_PORT,
    log_config,
)
from document_normalizer import normalize_documents
from model_catalog import get_catalog, resolve_model_name
from rerank_errors import BackendAPIError, ProtocolError, RerankError, ValidationError
from rerank_orchestrator import RerankOrchestrator
from rerank_schemas import (
    BatchRerankItem,
    BatchRerankRequest,
    BatchRerankResponse,
    HealthResponse,
    RerankedDocument,
    RerankRequest,
    RerankServiceRequest,
    RerankServiceResponse,
)


logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Ollama Reranker Service", version="0.1.0")

orchestrator = RerankOrchestrator(OLLAMA_BASE_URL)


def _format_document(doc: RerankedDocument) -> Dict[str, Any]:
    return doc.model_dump(mode="json", exclude_none=True)


async def rerank_item(req: RerankServiceRequest) -> RerankServiceResponse:
    """Eén rerank aanvraag: valideren, normaliseren, ranken, formatteren."""
    if not req.query or not req.query.strip():
        raise ValidationError("Query cannot be empty")
    model = resolve_model_name(req.model, req.custom_model)

    documents = normalize_documents(req.documents, req.content_field)
    if not documents:
        return RerankServiceResponse(query=req.query, documents=[], message="No documents to rerank")

    request = RerankRequest(
        query=req.query,
        documents=documents,
        model=model,
        instruction=req.instruction,
        top_k=req.top_k,
        threshold=req.threshold,
        batch_size=req.batch_size,
        timeout_ms=req.timeout_ms,
        api_type=req.api_type,
        include_original_scores=req.include_original_scores,
        classification=req.classification,
    )
    ranked = await orchestrator.rerank(request)

    if req.output_format == "simple":
        return RerankServiceResponse(query=req.query, documents=[doc.content for doc in ranked])
    return RerankServiceResponse(query=req.query, documents=[_format_document(doc) for doc in ranked])


def _to_http_exception(e: Exception) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, (ProtocolError, BackendAPIError)):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(
        status="ok",
        service="reranker",
        model=RERANK_MODEL,
        ollama_base_url=orchestrator.base_url,
    )


@app.get("/models")
def models():
    return get_catalog(orchestrator.base_url)


@app.get("/capabilities")
async def capabilities():
    """Server status en het gedetecteerde rerank protocol (altijd vers opgehaald)."""
    api_type, status = await orchestrator.capabilities()
    return {"api_type": api_type.value, **status.model_dump()}


@app.post("/rerank", response_model=RerankServiceResponse)
async def rerank(req: RerankServiceRequest):
    try:
        return await rerank_item(req)
    except RerankError as e:
        logger.error("Rerank failed: %s", e)
        raise _to_http_exception(e)
    except Exception as e:
        logger.exception("Rerank failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/rerank/batch", response_model=BatchRerankResponse)
async def rerank_batch(req: BatchRerankRequest):
    """
    Rerank meerdere items los van elkaar.

    Met continue_on_failure wordt een gefaald item een error record
    in plaats van dat de hele batch faalt.
    """
    results: List[BatchRerankItem] = []
    for item_index, item in enumerate(req.items):
        try:
            response = await rerank_item(item)
        except Exception as e:
            if req.continue_on_failure:
                logger.warning(f"[Batch] Item {item_index} failed, continuing: {e}")
                results.append(BatchRerankItem(error=str(e)))
                continue
            logger.error(f"[Batch] Item {item_index} failed: {e}")
            raise _to_http_exception(e)
        results.append(BatchRerankItem(**response.model_dump()))
    return BatchRerankResponse(items=results)


if __name__ == "__main__":
    import uvicorn

    log_config()
    uvicorn.run(app, host=RERANKER_SERVICE_HOST, port=RERANKER_SERVICE_PORT)
