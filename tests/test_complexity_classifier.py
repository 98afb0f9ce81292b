"""
Tests voor complexity classificatie en de strategie merge.
"""
import httpx
import pytest

from complexity_classifier import (
    apply_classification_strategy,
    classify_document,
    classify_documents,
    synthetic_score,
)
from conftest import BASE_URL, json_route, request_json
from rerank_schemas import (
    ClassificationOptions,
    ClassificationResult,
    ClassificationStrategy,
    ComplexityClass,
    ComplexityFilter,
    Document,
)

LOW = ClassificationResult(complexity=ComplexityClass.LOW, confidence=0.9)
HIGH = ClassificationResult(complexity=ComplexityClass.HIGH, confidence=0.7)


@pytest.mark.asyncio
async def test_classify_success(make_backend):
    backend = make_backend({"/api/classify": json_route({
        "complexity": "high",
        "confidence": 1.4,
        "processing_time": 0.25,
        "model": "resnet18-onnx",
    })})
    document = Document(content="Balans 2023", original_index=0)

    result = await classify_document(backend.client(), BASE_URL, document, "resnet18-onnx", 5000)

    assert result.complexity == ComplexityClass.HIGH
    assert result.confidence == 1.0
    assert result.processing_time_ms == pytest.approx(250.0)
    assert result.model_used == "resnet18-onnx"
    assert request_json(backend.calls[0]) == {"text": "Balans 2023", "model": "resnet18-onnx"}


@pytest.mark.asyncio
async def test_image_from_metadata_is_sent(make_backend):
    backend = make_backend({"/api/classify": json_route({"complexity": "LOW"})})
    document = Document(content="scan", original_index=0, metadata={"image_base64": "aGVsbG8="})

    await classify_document(backend.client(), BASE_URL, document, "lfm25-vl", 5000)

    assert request_json(backend.calls[0])["image"] == "aGVsbG8="


@pytest.mark.asyncio
async def test_failure_defaults_to_low(make_backend):
    backend = make_backend({"/api/classify": lambda r: httpx.Response(500)})
    document = Document(content="x", original_index=0)

    result = await classify_document(backend.client(), BASE_URL, document, "m", 5000)

    assert result.complexity == ComplexityClass.LOW
    assert result.confidence == 0.0


@pytest.mark.asyncio
async def test_unknown_complexity_defaults_to_low(make_backend):
    backend = make_backend({"/api/classify": json_route({"complexity": "MEDIUM", "confidence": 0.9})})
    document = Document(content="x", original_index=0)

    result = await classify_document(backend.client(), BASE_URL, document, "m", 5000)

    assert result.complexity == ComplexityClass.LOW
    assert result.confidence == 0.0


@pytest.mark.asyncio
async def test_classify_documents_keeps_order(make_backend, docs):
    def route(request):
        text = request_json(request)["text"]
        return httpx.Response(200, json={"complexity": "HIGH" if "tabel" in text else "LOW"})

    backend = make_backend({"/api/classify": route})

    results = await classify_documents(backend.client(), BASE_URL, docs("tekst", "tabel", "tekst"), "m", 5000)

    assert [r.complexity for r in results] == [ComplexityClass.LOW, ComplexityClass.HIGH, ComplexityClass.LOW]


def test_filter_high(docs):
    options = ClassificationOptions(strategy=ClassificationStrategy.FILTER, filter_complexity=ComplexityFilter.HIGH)

    survivors = apply_classification_strategy(docs("a", "b", "c"), [LOW, HIGH, LOW], options)

    assert len(survivors) == 1
    assert survivors[0].document.content == "b"
    assert survivors[0].attach_metadata is False


def test_filter_low(docs):
    options = ClassificationOptions(strategy=ClassificationStrategy.FILTER, filter_complexity=ComplexityFilter.LOW)

    survivors = apply_classification_strategy(docs("a", "b", "c"), [LOW, HIGH, LOW], options)

    assert [s.document.content for s in survivors] == ["a", "c"]


def test_filter_both_keeps_everything(docs):
    options = ClassificationOptions(strategy=ClassificationStrategy.FILTER, filter_complexity=ComplexityFilter.BOTH)

    assert len(apply_classification_strategy(docs("a", "b"), [LOW, HIGH], options)) == 2


def test_metadata_keeps_all_and_attaches(docs):
    options = ClassificationOptions(strategy=ClassificationStrategy.METADATA, filter_complexity=ComplexityFilter.HIGH)

    survivors = apply_classification_strategy(docs("a", "b", "c"), [LOW, HIGH, LOW], options)

    assert len(survivors) == 3
    assert all(s.attach_metadata for s in survivors)
    assert survivors[1].classification.complexity == ComplexityClass.HIGH


def test_both_filters_and_attaches(docs):
    options = ClassificationOptions(strategy=ClassificationStrategy.BOTH, filter_complexity=ComplexityFilter.HIGH)

    survivors = apply_classification_strategy(docs("a", "b", "c"), [LOW, HIGH, LOW], options)

    assert len(survivors) == 1
    assert survivors[0].attach_metadata is True


def test_filter_can_remove_everything(docs):
    options = ClassificationOptions(strategy=ClassificationStrategy.FILTER, filter_complexity=ComplexityFilter.HIGH)

    assert apply_classification_strategy(docs("a", "b"), [LOW, LOW], options) == []


def test_synthetic_score():
    assert synthetic_score(ClassificationResult(complexity=ComplexityClass.HIGH, confidence=0.5)) == pytest.approx(0.9)
    assert synthetic_score(ClassificationResult(complexity=ComplexityClass.LOW, confidence=None)) == pytest.approx(0.2)
    assert synthetic_score(ClassificationResult(complexity=ComplexityClass.HIGH, confidence=1.0)) == 1.0
