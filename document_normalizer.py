"""
Document Normalizer

Zet heterogene document input (dicts met verschillende content velden,
LangChain-achtige objecten, losse strings) één keer om naar Document.
Alles na deze stap werkt alleen nog met Document.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Mapping, Optional, Sequence

from rerank_errors import ValidationError
from rerank_schemas import Document

logger = logging.getLogger(__name__)

# Volgorde waarin content velden geprobeerd worden
CONTENT_FIELDS = ("pageContent", "page_content", "text", "content", "document")
ORIGINAL_SCORE_FIELDS = ("_originalScore", "original_score")


def _content_from_mapping(doc: Mapping[str, Any], content_field: Optional[str]) -> str:
    fields = (content_field,) + CONTENT_FIELDS if content_field else CONTENT_FIELDS
    for field in fields:
        value = doc.get(field)
        if isinstance(value, str) and value:
            return value
    # Geen bekend veld: hele object als tekst
    return json.dumps(doc, default=str, ensure_ascii=False)


def _original_score(doc: Mapping[str, Any], index: int) -> Optional[float]:
    for field in ORIGINAL_SCORE_FIELDS:
        if field in doc and doc[field] is not None:
            value = doc[field]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(f"Document {index}: '{field}' must be a number, got {value!r}")
            return float(value)
    return None


def normalize_document(raw: Any, index: int, content_field: Optional[str] = None) -> Document:
    """
    Normaliseer één document.

    Args:
        raw: dict, Document, object met page_content, of scalar
        index: Positie in de input (wordt original_index)
        content_field: Voorkeursveld voor de tekst (bijv. 'pageContent')

    Raises:
        ValidationError: None of metadata die geen object is
    """
    if raw is None:
        raise ValidationError(f"Document {index} is empty (null)")

    if isinstance(raw, Document):
        return raw.model_copy(update={"original_index": index})

    if isinstance(raw, Mapping):
        metadata = raw.get("metadata") or {}
        if not isinstance(metadata, Mapping):
            raise ValidationError(f"Document {index}: 'metadata' must be an object")
        return Document(
            content=_content_from_mapping(raw, content_field),
            metadata=dict(metadata),
            original_index=index,
            original_score=_original_score(raw, index),
        )

    # LangChain Document en vergelijkbare objecten
    page_content = getattr(raw, "page_content", None)
    if isinstance(page_content, str):
        metadata = getattr(raw, "metadata", None) or {}
        return Document(
            content=page_content,
            metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
            original_index=index,
        )

    if isinstance(raw, (str, int, float)):
        return Document(content=str(raw), original_index=index)

    raise ValidationError(f"Document {index}: unsupported type {type(raw).__name__}")


def normalize_documents(raw_documents: Sequence[Any], content_field: Optional[str] = None) -> List[Document]:
    """Normaliseer een lijst documenten; index = positie in de lijst."""
    if isinstance(raw_documents, (str, bytes)) or not isinstance(raw_documents, Sequence):
        raise ValidationError("Documents must be an array")
    return [normalize_document(raw, i, content_field) for i, raw in enumerate(raw_documents)]


def extract_documents_from_field(item: Mapping[str, Any], field: str) -> List[Any]:
    """Haal de documenten lijst uit een veld van een input item."""
    value = item.get(field)
    if not isinstance(value, list):
        raise ValidationError(f'Field "{field}" must be an array of documents')
    return value
