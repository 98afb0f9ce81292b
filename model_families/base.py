"""
Base Classes for Reranker Model Families

Definieert de interface voor alle model families. Een family bepaalt
welk prompt formaat een reranker model verwacht en hoe de vrije-tekst
output terug naar een score tussen 0.0 en 1.0 wordt vertaald.
"""
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional


class ModelFamily(str, Enum):
    BGE = "bge"
    QWEN = "qwen"
    GENERIC = "generic"


NUMBER_PATTERN = re.compile(r"(\d*\.?\d+)")


def extract_first_number(output: str) -> Optional[float]:
    """Eerste integer/decimaal token in de output, of None."""
    match = NUMBER_PATTERN.search(output)
    if not match:
        return None
    return float(match.group(1))


def clamp_score(score: float) -> float:
    return min(max(score, 0.0), 1.0)


class RerankModelFamily(ABC):
    """
    Base class voor alle model families.

    Elke family moet implementeren:
    - family: ModelFamily waarde
    - marker: substring in de model naam (lowercase) die deze family selecteert
    - format_prompt(): prompt voor /api/generate
    - parse_score(): score uit de output, of None als de output niets zegt
    """

    family: ModelFamily = ModelFamily.GENERIC
    marker: str = ""
    description: str = ""

    def matches(self, model: str) -> bool:
        """Substring match op de model identifier (case-insensitive)."""
        return bool(self.marker) and self.marker in (model or "").lower()

    @abstractmethod
    def format_prompt(self, query: str, document_content: str, instruction: str) -> str:
        raise NotImplementedError

    def parse_score(self, output: str) -> Optional[float]:
        """
        Vertaal model output naar een score.

        Returns:
            Score tussen 0.0 en 1.0, of None zodat de volgende parser het overneemt
        """
        return None

    def get_info(self) -> Dict[str, Any]:
        return {
            "family": self.family.value,
            "marker": self.marker,
            "description": self.description,
        }
