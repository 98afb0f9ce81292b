from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from config.rerank_settings import (
    DEFAULT_INSTRUCTION,
    RERANK_BATCH_SIZE,
    RERANK_MODEL,
    RERANK_THRESHOLD,
    RERANK_TIMEOUT_MS,
    RERANK_TOP_K,
)


class ApiType(str, Enum):
    GENERATE = "generate"
    DIRECT = "direct"
    VL_CLASSIFIER = "vl-classifier"
    AUTO = "auto"


class ComplexityClass(str, Enum):
    LOW = "LOW"
    HIGH = "HIGH"


class ClassificationStrategy(str, Enum):
    METADATA = "metadata"
    FILTER = "filter"
    BOTH = "both"


class ComplexityFilter(str, Enum):
    LOW = "LOW"
    HIGH = "HIGH"
    BOTH = "both"


class Document(BaseModel):
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    original_index: int
    original_score: Optional[float] = None

    model_config = {"frozen": True}


class RerankedDocument(BaseModel):
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    original_index: int
    rerank_score: float
    original_score: Optional[float] = None
    complexity_class: Optional[ComplexityClass] = None
    complexity_confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class ClassificationOptions(BaseModel):
    enabled: bool = True
    strategy: ClassificationStrategy = ClassificationStrategy.METADATA
    filter_complexity: ComplexityFilter = ComplexityFilter.BOTH


class RerankRequest(BaseModel):
    # query wordt pas in de orchestrator gevalideerd (ValidationError i.p.v. 422)
    query: str
    documents: List[Document] = Field(default_factory=list)
    model: str = RERANK_MODEL
    instruction: str = DEFAULT_INSTRUCTION
    top_k: int = RERANK_TOP_K
    threshold: float = Field(default=RERANK_THRESHOLD, ge=0.0, le=1.0)
    batch_size: int = Field(default=RERANK_BATCH_SIZE, ge=1)
    timeout_ms: int = Field(default=RERANK_TIMEOUT_MS, ge=1)
    api_type: ApiType = ApiType.GENERATE
    include_original_scores: bool = False
    classification: Optional[ClassificationOptions] = None


@dataclass(frozen=True)
class ScoreResult:
    """Score van één document, alleen binnen de ranking stap gebruikt."""
    index: int
    score: float


class ServerCapabilities(BaseModel):
    status: str = "error"  # healthy | degraded | error
    has_classifier: bool = False
    has_reranker: bool = False
    models_loaded: List[str] = Field(default_factory=list)
    vram_usage: Optional[float] = None
    version: Optional[str] = None


class ClassificationResult(BaseModel):
    complexity: ComplexityClass = ComplexityClass.LOW
    confidence: Optional[float] = None
    processing_time_ms: Optional[float] = None
    model_used: Optional[str] = None

    model_config = {"protected_namespaces": ()}


class DirectRerankHit(BaseModel):
    index: int
    document: str = ""
    relevance_score: float


# ---------- Service modellen ----------

class RerankServiceRequest(BaseModel):
    query: str = ""
    # dicts (pageContent/text/content/document), strings of getallen
    documents: List[Any] = Field(default_factory=list)
    content_field: Optional[str] = None
    model: str = RERANK_MODEL
    custom_model: Optional[str] = None
    instruction: str = DEFAULT_INSTRUCTION
    top_k: int = RERANK_TOP_K
    threshold: float = Field(default=RERANK_THRESHOLD, ge=0.0, le=1.0)
    batch_size: int = Field(default=RERANK_BATCH_SIZE, ge=1, le=50)
    timeout_ms: int = Field(default=RERANK_TIMEOUT_MS, ge=1000, le=300000)
    api_type: ApiType = ApiType.GENERATE
    include_original_scores: bool = False
    classification: Optional[ClassificationOptions] = None
    output_format: Literal["documents", "simple"] = "documents"

    # onbekende velden gewoon negeren
    model_config = {"extra": "ignore"}


class RerankServiceResponse(BaseModel):
    query: str
    documents: List[Any] = Field(default_factory=list)
    message: Optional[str] = None


class BatchRerankRequest(BaseModel):
    items: List[RerankServiceRequest]
    continue_on_failure: bool = False


class BatchRerankItem(BaseModel):
    query: Optional[str] = None
    documents: Optional[List[Any]] = None
    message: Optional[str] = None
    error: Optional[str] = None


class BatchRerankResponse(BaseModel):
    items: List[BatchRerankItem]


class HealthResponse(BaseModel):
    status: str
    service: str
    model: str
    ollama_base_url: str
