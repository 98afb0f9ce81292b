"""
Qwen3 Reranker Family

Qwen3-Reranker modellen gebruiken een chat formaat met system/user/assistant
turns en antwoorden met "yes" of "no".
See: https://huggingface.co/dengcao/Qwen3-Reranker-4B
"""
import re
from typing import Optional

from ..base import ModelFamily, RerankModelFamily

POSITIVE_PATTERN = re.compile(r"\b(yes|relevant|positive|match)\b")
NEGATIVE_PATTERN = re.compile(r"\b(no|irrelevant|negative|not\s+relevant)\b")
# Telt "positieven" voor de confidence bonus
REASONING_PATTERN = re.compile(r"relevant|yes|match", re.IGNORECASE)
INTENSIFIERS = ("completely", "totally", "not at all")


class QwenFamily(RerankModelFamily):
    """Qwen3 reranker: yes/no oordeel, lengte van de redenering als confidence."""

    family = ModelFamily.QWEN
    marker = "qwen"
    description = "Qwen3 rerankers (chat template, yes/no judgment)"

    def format_prompt(self, query: str, document_content: str, instruction: str) -> str:
        return (
            "<|im_start|>system\n"
            "Judge whether the Document meets the requirements based on the Query and the Instruct provided. "
            'Note that the answer can only be "yes" or "no".<|im_end|>\n'
            "<|im_start|>user\n"
            f"<Instruct>: {instruction}\n"
            f"<Query>: {query}\n"
            f"<Document>: {document_content}<|im_end|>\n"
            "<|im_start|>assistant\n"
            "<think>"
        )

    def parse_score(self, output: str) -> Optional[float]:
        output_lower = output.lower()
        yes_match = POSITIVE_PATTERN.search(output_lower)
        no_match = NEGATIVE_PATTERN.search(output_lower)

        if yes_match and not no_match:
            has_reasoning = len(output) > 100
            has_multiple_positives = len(REASONING_PATTERN.findall(output)) > 1
            if has_reasoning and has_multiple_positives:
                return 0.95
            if has_reasoning:
                return 0.85
            return 0.75

        if no_match and not yes_match:
            has_strong_negative = any(word in output_lower for word in INTENSIFIERS)
            return 0.05 if has_strong_negative else 0.15

        if yes_match and no_match:
            # Gemengde signalen: wat komt eerst
            return 0.6 if yes_match.start() < no_match.start() else 0.4

        return None
