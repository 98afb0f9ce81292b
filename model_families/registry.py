"""
Model Family Registry

Centraal register voor reranker model families. De family wordt één keer
per rerank call opgelost en daarna voor elk document hergebruikt.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from .base import ModelFamily, RerankModelFamily
from .families.generic import GenericFamily

logger = logging.getLogger(__name__)


class ModelFamilyRegistry:
    """Geordend register: eerste family waarvan de marker matcht wint."""

    def __init__(self):
        self.families: Dict[ModelFamily, RerankModelFamily] = {}
        self.default = GenericFamily()

    def register(self, family: RerankModelFamily):
        """Registreer een family; volgorde van registratie is match-volgorde."""
        self.families[family.family] = family
        logger.info(f"Registered reranker model family: {family.family.value}")

    def get(self, family: ModelFamily) -> RerankModelFamily:
        if family == ModelFamily.GENERIC:
            return self.default
        return self.families.get(family, self.default)

    def list_available(self) -> List[Dict[str, Any]]:
        return [f.get_info() for f in self.families.values()] + [self.default.get_info()]

    def resolve(self, model: str) -> RerankModelFamily:
        """
        Bepaal de family voor een model identifier.

        Returns:
            Gematchte family, of de generic family als niets matcht
        """
        for family in self.families.values():
            if family.matches(model):
                logger.debug(f"[ModelFamily] '{model}' → {family.family.value}")
                return family
        logger.debug(f"[ModelFamily] '{model}' → generic (no marker matched)")
        return self.default

    def parse_response(self, family: RerankModelFamily, response: Optional[Mapping[str, Any]]) -> float:
        """
        Haal een score tussen 0.0 en 1.0 uit een /api/generate response.

        Parsers worden in volgorde geprobeerd (family-specifiek, dan generic);
        de eerste niet-None score wint. Raist nooit: onleesbare output wordt
        een best-effort schatting zodat één document de batch niet breekt.
        """
        output = response.get("response") if isinstance(response, Mapping) else None
        if not output or not isinstance(output, str):
            return 0.0

        score = family.parse_score(output)
        if score is None:
            score = self.default.parse_score(output)
        return score


# Global registry instance
_registry = None


def get_registry() -> ModelFamilyRegistry:
    """Get global registry instance (singleton)."""
    global _registry
    if _registry is None:
        _registry = ModelFamilyRegistry()
    return _registry


# Convenience functions
def resolve_family(model: str) -> RerankModelFamily:
    return get_registry().resolve(model)


def format_prompt(model: str, query: str, document_content: str, instruction: str) -> str:
    """Prompt voor een model, family wordt on-the-fly opgelost."""
    return resolve_family(model).format_prompt(query, document_content, instruction)


def parse_response(model: str, response: Optional[Mapping[str, Any]]) -> float:
    registry = get_registry()
    return registry.parse_response(registry.resolve(model), response)


def list_families() -> List[Dict[str, Any]]:
    return get_registry().list_available()
