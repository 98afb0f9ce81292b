#!/usr/bin/env python3
"""
Rerank CLI

Rerank een JSON bestand met documenten tegen een query via Ollama.

Usage:
    python rerank_cli.py --query "wat is de omzet" --documents docs.json [--top-k 5]
    python rerank_cli.py --detect
"""
import argparse
import asyncio
import json
import logging
import sys

import pydantic

from config.rerank_settings import (
    DEFAULT_INSTRUCTION,
    OLLAMA_BASE_URL,
    RERANK_API_TYPE,
    RERANK_BATCH_SIZE,
    RERANK_MODEL,
    RERANK_THRESHOLD,
    RERANK_TIMEOUT_MS,
    RERANK_TOP_K,
)
from document_normalizer import extract_documents_from_field, normalize_documents
from model_catalog import resolve_model_name
from rerank_errors import RerankError, ValidationError
from rerank_orchestrator import RerankOrchestrator
from rerank_schemas import (
    ApiType,
    ClassificationOptions,
    ClassificationStrategy,
    ComplexityFilter,
    RerankRequest,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Ollama document reranker')
    parser.add_argument('--query', type=str, help='Zoekvraag')
    parser.add_argument(
        '--documents',
        type=str,
        help='JSON bestand: lijst documenten, of object met een documenten veld'
    )
    parser.add_argument(
        '--documents-field',
        type=str,
        default='documents',
        help='Veld met de documenten als het JSON bestand een object is (default: documents)'
    )
    parser.add_argument('--content-field', type=str, default=None, help='Veld met de document tekst')
    parser.add_argument('--model', type=str, default=RERANK_MODEL, help=f'Reranker model (default: {RERANK_MODEL})')
    parser.add_argument('--custom-model', type=str, default=None, help="Modelnaam als --model custom is")
    parser.add_argument('--instruction', type=str, default=DEFAULT_INSTRUCTION)
    parser.add_argument(
        '--api-type',
        type=str,
        choices=[t.value for t in ApiType],
        default=RERANK_API_TYPE,
        help=f'Rerank protocol (default: {RERANK_API_TYPE})'
    )
    parser.add_argument('--top-k', type=int, default=RERANK_TOP_K)
    parser.add_argument('--threshold', type=float, default=RERANK_THRESHOLD)
    parser.add_argument('--batch-size', type=int, default=RERANK_BATCH_SIZE)
    parser.add_argument('--timeout-ms', type=int, default=RERANK_TIMEOUT_MS)
    parser.add_argument('--include-original-scores', action='store_true')
    parser.add_argument(
        '--classify',
        type=str,
        choices=[s.value for s in ClassificationStrategy],
        default=None,
        help='Complexity classificatie aanzetten met deze strategie'
    )
    parser.add_argument(
        '--filter-complexity',
        type=str,
        choices=[f.value for f in ComplexityFilter],
        default=ComplexityFilter.BOTH.value,
    )
    parser.add_argument('--simple', action='store_true', help='Alleen de document teksten printen')
    parser.add_argument('--detect', action='store_true', help='Alleen het gedetecteerde API type printen')
    parser.add_argument('--base-url', type=str, default=OLLAMA_BASE_URL)
    return parser


def load_documents(path: str, documents_field: str, content_field=None):
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = extract_documents_from_field(data, documents_field)
    return normalize_documents(data, content_field)


def build_request(args) -> RerankRequest:
    if not args.query:
        raise ValidationError("Query cannot be empty")
    if not args.documents:
        raise ValidationError("--documents is required")

    classification = None
    if args.classify:
        classification = ClassificationOptions(
            enabled=True,
            strategy=ClassificationStrategy(args.classify),
            filter_complexity=ComplexityFilter(args.filter_complexity),
        )

    return RerankRequest(
        query=args.query,
        documents=load_documents(args.documents, args.documents_field, args.content_field),
        model=resolve_model_name(args.model, args.custom_model),
        instruction=args.instruction,
        top_k=args.top_k,
        threshold=args.threshold,
        batch_size=args.batch_size,
        timeout_ms=args.timeout_ms,
        api_type=ApiType(args.api_type),
        include_original_scores=args.include_original_scores,
        classification=classification,
    )


def main(argv=None):
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    orchestrator = RerankOrchestrator(args.base_url)

    try:
        if args.detect:
            api_type, _ = asyncio.run(orchestrator.capabilities())
            print(api_type.value)
            return 0

        request = build_request(args)
        ranked = asyncio.run(orchestrator.rerank(request))
    except RerankError as e:
        logger.error(f"[CLI] Rerank failed: {e}")
        sys.exit(1)
    except pydantic.ValidationError as e:
        logger.error(f"[CLI] Invalid options: {e}")
        sys.exit(1)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"[CLI] Could not read documents: {e}")
        sys.exit(1)

    if args.simple:
        output = [doc.content for doc in ranked]
    else:
        output = [doc.model_dump(mode='json', exclude_none=True) for doc in ranked]
    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == '__main__':
    main()
