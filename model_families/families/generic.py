"""
Generic Reranker Family

Fallback voor onbekende modellen en laatste parser in elke keten.
Geeft altijd een score terug, nooit None.
"""
from ..base import ModelFamily, RerankModelFamily, clamp_score, extract_first_number

POSITIVE_KEYWORDS = ("relevant", "yes", "high", "strong", "good", "match", "related")
NEGATIVE_KEYWORDS = ("irrelevant", "no", "low", "weak", "poor", "unrelated", "different")

NEUTRAL_SCORE = 0.5


class GenericFamily(RerankModelFamily):
    """Onbekende modellen: Task/Query/Document prompt, numeriek of keyword-telling."""

    family = ModelFamily.GENERIC
    marker = ""
    description = "Default format for unknown models"

    def format_prompt(self, query: str, document_content: str, instruction: str) -> str:
        return (
            f"Task: {instruction}\n\n"
            f"Query: {query}\n\n"
            f"Document: {document_content}\n\n"
            "Score:"
        )

    def parse_score(self, output: str) -> float:
        score = extract_first_number(output)
        if score is not None:
            if 0 <= score <= 1:
                return score
            if 1 < score <= 10:
                return score / 10
            if 10 < score <= 100:
                return score / 100

        output_lower = output.lower()
        positive_count = sum(1 for kw in POSITIVE_KEYWORDS if kw in output_lower)
        negative_count = sum(1 for kw in NEGATIVE_KEYWORDS if kw in output_lower)

        if positive_count > negative_count:
            return clamp_score(NEUTRAL_SCORE + positive_count * 0.1)
        if negative_count > positive_count:
            return clamp_score(NEUTRAL_SCORE - negative_count * 0.1)

        return NEUTRAL_SCORE
