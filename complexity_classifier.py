"""
Complexity Classifier - LOW/HIGH complexiteit per document via /api/classify.

Gebruikt een vision-language classifier (bijv. ResNet18-ONNX of lfm25-vl)
om per document een grove complexiteit te bepalen. Classificatie is
advies: bij elke fout wordt het document LOW met confidence 0, het
document valt nooit uit de pipeline.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import httpx

from config.rerank_settings import get_ollama_endpoint
from rerank_schemas import (
    ClassificationOptions,
    ClassificationResult,
    ClassificationStrategy,
    ComplexityClass,
    ComplexityFilter,
    Document,
)

logger = logging.getLogger(__name__)

# Metadata velden waarin een base64 image kan zitten
IMAGE_METADATA_KEYS = ("image", "image_base64")

HIGH_BASE_SCORE = 0.8
LOW_BASE_SCORE = 0.2
CONFIDENCE_BOOST = 0.2


@dataclass
class ClassifiedDocument:
    """Document met classificatie; attach_metadata bepaalt of de velden in de output komen."""
    document: Document
    classification: ClassificationResult
    attach_metadata: bool = True


def default_classification() -> ClassificationResult:
    return ClassificationResult(complexity=ComplexityClass.LOW, confidence=0.0)


def _extract_image(document: Document) -> Optional[str]:
    for key in IMAGE_METADATA_KEYS:
        value = document.metadata.get(key)
        if isinstance(value, str) and value:
            return value
    return None


async def classify_document(
    client: httpx.AsyncClient,
    base_url: str,
    document: Document,
    model: str,
    timeout_ms: int,
) -> ClassificationResult:
    """
    Classificeer één document.

    Returns:
        ClassificationResult; bij fout altijd LOW met confidence 0
    """
    endpoint = get_ollama_endpoint("/api/classify", base_url)
    payload = {"text": document.content, "model": model}
    image = _extract_image(document)
    if image:
        payload["image"] = image

    try:
        resp = await client.post(endpoint, json=payload, timeout=timeout_ms / 1000.0)
        resp.raise_for_status()
        data = resp.json()

        complexity = ComplexityClass(str(data["complexity"]).upper())
        confidence = data.get("confidence")
        processing_time = data.get("processing_time")
        result = ClassificationResult(
            complexity=complexity,
            confidence=min(max(float(confidence), 0.0), 1.0) if confidence is not None else None,
            processing_time_ms=float(processing_time) * 1000 if processing_time is not None else None,
            model_used=data.get("model"),
        )
    except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
        logger.warning(
            f"[Classifier] Classification failed for document {document.original_index}, "
            f"defaulting to LOW: {e}"
        )
        return default_classification()

    logger.debug(
        f"[Classifier] Document {document.original_index}: {result.complexity.value} "
        f"(confidence={result.confidence})"
    )
    return result


async def classify_documents(
    client: httpx.AsyncClient,
    base_url: str,
    documents: Sequence[Document],
    model: str,
    timeout_ms: int,
) -> List[ClassificationResult]:
    """Classificeer alle documenten tegelijk (één wave, geen batch limiet)."""
    return list(
        await asyncio.gather(
            *(classify_document(client, base_url, doc, model, timeout_ms) for doc in documents)
        )
    )


def apply_classification_strategy(
    documents: Sequence[Document],
    classifications: Sequence[ClassificationResult],
    options: ClassificationOptions,
) -> List[ClassifiedDocument]:
    """
    Combineer documenten met hun classificatie volgens de strategie.

    - metadata: alle documenten, met complexity velden
    - filter: alleen documenten met de gevraagde complexity, zonder velden
    - both: filter en velden op de overblijvers

    Returns:
        Overgebleven documenten in input volgorde (kan leeg zijn)
    """
    strategy = options.strategy
    wanted = options.filter_complexity
    filtering = strategy in (ClassificationStrategy.FILTER, ClassificationStrategy.BOTH)
    attach = strategy in (ClassificationStrategy.METADATA, ClassificationStrategy.BOTH)

    classified: List[ClassifiedDocument] = []
    for document, classification in zip(documents, classifications):
        if filtering and wanted != ComplexityFilter.BOTH and classification.complexity.value != wanted.value:
            continue
        classified.append(ClassifiedDocument(document, classification, attach_metadata=attach))

    if filtering:
        logger.info(
            f"[Classifier] Filter {wanted.value}: {len(classified)}/{len(documents)} documents kept"
        )
    return classified


def synthetic_score(classification: ClassificationResult) -> float:
    """
    Score voor backends die wel classificeren maar niet ranken.

    HIGH → 0.8, LOW → 0.2, plus 0.2 * confidence.
    """
    base = HIGH_BASE_SCORE if classification.complexity == ComplexityClass.HIGH else LOW_BASE_SCORE
    boost = CONFIDENCE_BOOST * (classification.confidence or 0.0)
    return min(max(base + boost, 0.0), 1.0)
