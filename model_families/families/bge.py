"""
BGE Reranker Family

BAAI/bge-reranker modellen verwachten een plat Instruction/Query/Document
formaat en antwoorden meestal met een getal.
See: https://huggingface.co/BAAI/bge-reranker-v2-m3
"""
from typing import Optional

from ..base import ModelFamily, RerankModelFamily, clamp_score, extract_first_number


class BGEFamily(RerankModelFamily):
    """BGE reranker: numerieke score, keyword fallback."""

    family = ModelFamily.BGE
    marker = "bge"
    description = "BAAI BGE rerankers (flat Instruction/Query/Document prompt, numeric output)"

    def format_prompt(self, query: str, document_content: str, instruction: str) -> str:
        return (
            f"Instruction: {instruction}\n\n"
            f"Query: {query}\n\n"
            f"Document: {document_content}\n\n"
            "Relevance:"
        )

    def parse_score(self, output: str) -> Optional[float]:
        score = extract_first_number(output)
        if score is not None:
            # BGE geeft scores in verschillende ranges terug, normaliseer naar 0-1
            if 1 < score <= 10:
                score = score / 10
            elif score > 10:
                score = score / 100
            return clamp_score(score)

        output_lower = output.lower()
        if "high" in output_lower or "relevant" in output_lower:
            return 0.8
        if "low" in output_lower or "irrelevant" in output_lower:
            return 0.2

        return None
