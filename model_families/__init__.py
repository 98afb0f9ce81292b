"""
Reranker Model Families

Pluggable prompt formaten en response parsers per reranker model familie.

Usage:
    from model_families import resolve_family, get_registry

    # Eén keer per rerank call
    family = resolve_family("dengcao/Qwen3-Reranker-4B:Q5_K_M")

    prompt = family.format_prompt(query, document, instruction)
    score = get_registry().parse_response(family, {"response": "yes"})
"""
import logging

from .base import ModelFamily, RerankModelFamily

from .registry import (
    ModelFamilyRegistry,
    get_registry,
    resolve_family,
    format_prompt,
    parse_response,
    list_families,
)

from .families import BGEFamily, QwenFamily, GenericFamily

logger = logging.getLogger(__name__)


def _initialize_default_families():
    """
    Registreer de standaard families bij import.
    BGE staat voor Qwen: die volgorde bepaalt de match.
    """
    registry = get_registry()
    for family in (BGEFamily(), QwenFamily()):
        registry.register(family)


# Auto-initialize bij import
_initialize_default_families()


__all__ = [
    "ModelFamily",
    "RerankModelFamily",
    "ModelFamilyRegistry",
    "get_registry",
    "resolve_family",
    "format_prompt",
    "parse_response",
    "list_families",
    "BGEFamily",
    "QwenFamily",
    "GenericFamily",
]
