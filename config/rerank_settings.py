"""
Reranker Configuration Settings
Configuratie voor Ollama backend, rerank defaults en retry gedrag
"""

import logging
import os

logger = logging.getLogger(__name__)

# ============================================
# Ollama Backend
# ============================================

# Base URL van de Ollama (of compatibele) server
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

# Standaard reranker model (BGE v2-m3 is de beste general-purpose keuze)
RERANK_MODEL = os.getenv("RERANK_MODEL", "bge-reranker-v2-m3")

# generate | direct | vl-classifier | auto
RERANK_API_TYPE = os.getenv("RERANK_API_TYPE", "generate")

# ============================================
# Rerank Defaults
# ============================================

DEFAULT_INSTRUCTION = "Given a web search query, retrieve relevant passages that answer the query"
RERANK_INSTRUCTION = os.getenv("RERANK_INSTRUCTION", DEFAULT_INSTRUCTION)

RERANK_TOP_K = int(os.getenv("RERANK_TOP_K", "10"))
RERANK_THRESHOLD = float(os.getenv("RERANK_THRESHOLD", "0.0"))

# Aantal documenten dat tegelijk gescoord wordt (1 wave)
RERANK_BATCH_SIZE = int(os.getenv("RERANK_BATCH_SIZE", "10"))

# Timeout per HTTP request (milliseconden)
RERANK_TIMEOUT_MS = int(os.getenv("RERANK_TIMEOUT_MS", "30000"))

RERANK_INCLUDE_ORIGINAL_SCORES = os.getenv("RERANK_INCLUDE_ORIGINAL_SCORES", "false").lower() == "true"

# ============================================
# Retry / Probing
# ============================================

# Alleen het scoring pad (/api/generate) doet retries
RERANK_MAX_RETRIES = int(os.getenv("RERANK_MAX_RETRIES", "3"))
RERANK_RETRY_BASE_MS = float(os.getenv("RERANK_RETRY_BASE_MS", "100"))

# Vaste timeout voor capability probes (seconden), los van RERANK_TIMEOUT_MS
CAPABILITY_PROBE_TIMEOUT = float(os.getenv("CAPABILITY_PROBE_TIMEOUT", "5.0"))

# ============================================
# Service
# ============================================

RERANKER_SERVICE_PORT = int(os.getenv("RERANKER_SERVICE_PORT", "9200"))
RERANKER_SERVICE_HOST = os.getenv("RERANKER_SERVICE_HOST", "0.0.0.0")

# ============================================
# Helper Functions
# ============================================

def get_ollama_endpoint(path: str, base_url: str = None) -> str:
    """
    Bouw volledige Ollama endpoint URL.

    Args:
        path: endpoint path (e.g., '/api/generate' or 'api/rerank')
        base_url: optionele base URL (default: OLLAMA_BASE_URL)

    Returns:
        Full URL (e.g., 'http://localhost:11434/api/generate')
    """
    base = (base_url or OLLAMA_BASE_URL).rstrip('/')
    path = path.lstrip('/')
    return f"{base}/{path}"


def log_config():
    """Log huidige configuratie (voor debugging)."""
    logger.info("=" * 60)
    logger.info("Reranker Configuration")
    logger.info("=" * 60)
    logger.info(f"OLLAMA_BASE_URL: {OLLAMA_BASE_URL}")
    logger.info(f"RERANK_MODEL: {RERANK_MODEL}")
    logger.info(f"RERANK_API_TYPE: {RERANK_API_TYPE}")
    logger.info(f"RERANK_TOP_K: {RERANK_TOP_K}")
    logger.info(f"RERANK_THRESHOLD: {RERANK_THRESHOLD}")
    logger.info(f"RERANK_BATCH_SIZE: {RERANK_BATCH_SIZE}")
    logger.info(f"RERANK_TIMEOUT_MS: {RERANK_TIMEOUT_MS}")
    logger.info(f"RERANK_MAX_RETRIES: {RERANK_MAX_RETRIES}")
    logger.info(f"CAPABILITY_PROBE_TIMEOUT: {CAPABILITY_PROBE_TIMEOUT}")
    logger.info("=" * 60)
