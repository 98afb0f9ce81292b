"""
Model Catalog - bekende reranker modellen en de modellen op een Ollama server.

Gebruikt door de service (/models) en de CLI om een model te kiezen.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import requests

from config.rerank_settings import CAPABILITY_PROBE_TIMEOUT, OLLAMA_BASE_URL, get_ollama_endpoint
from rerank_errors import ValidationError

logger = logging.getLogger(__name__)

CUSTOM_MODEL = "custom"


@dataclass
class ModelPreset:
    name: str
    value: str
    description: str


MODEL_PRESETS: List[ModelPreset] = [
    ModelPreset("BGE Reranker v2-M3 (Recommended)", "bge-reranker-v2-m3", "Best general-purpose reranker"),
    ModelPreset("Qwen3-Reranker-0.6B (Fast)", "dengcao/Qwen3-Reranker-0.6B:Q5_K_M", "Fastest option"),
    ModelPreset("Qwen3-Reranker-4B (Balanced)", "dengcao/Qwen3-Reranker-4B:Q5_K_M", "Best balance"),
    ModelPreset("Qwen3-Reranker-8B (Most Accurate)", "dengcao/Qwen3-Reranker-8B:Q5_K_M", "Highest accuracy"),
    ModelPreset("Custom Model", CUSTOM_MODEL, "Specify your own model"),
]


def resolve_model_name(model: str, custom_model: Optional[str] = None) -> str:
    """
    Vertaal de model keuze naar de naam die Ollama verwacht.

    Raises:
        ValidationError: 'custom' zonder custom_model
    """
    if model == CUSTOM_MODEL:
        if not custom_model or not custom_model.strip():
            raise ValidationError("Custom model name is required")
        return custom_model.strip()
    if not model or not model.strip():
        raise ValidationError("Model name is required")
    return model


def list_ollama_models(base_url: str = OLLAMA_BASE_URL, timeout: float = CAPABILITY_PROBE_TIMEOUT) -> List[str]:
    """
    Haal model namen op via GET /api/tags.

    Returns:
        Model namen, lege lijst als de server niet bereikbaar is
    """
    try:
        resp = requests.get(get_ollama_endpoint("/api/tags", base_url), timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"[Catalog] Ollama model listing failed: {e}")
        return []

    models = data.get("models", []) if isinstance(data, dict) else []
    return [m.get("name", "") for m in models if isinstance(m, dict) and m.get("name")]


def get_catalog(base_url: str = OLLAMA_BASE_URL) -> Dict[str, Any]:
    """Presets plus de modellen die de server nu aanbiedt."""
    available = list_ollama_models(base_url)
    return {
        "presets": [asdict(p) for p in MODEL_PRESETS],
        "available": available,
        "installed_presets": [
            p.value for p in MODEL_PRESETS
            if p.value != CUSTOM_MODEL and any(p.value in name for name in available)
        ],
    }
