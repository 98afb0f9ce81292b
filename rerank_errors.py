"""
Rerank Errors

Exception hierarchy voor de rerank engine.

- ValidationError: input klopt niet (lege query, top_k < 1, onbruikbaar document)
- ProtocolError: backend antwoordt met een onverwachte structuur
- BackendAPIError: HTTP call naar de backend mislukt
    - TransientNetworkError: timeout, connectie fout of 5xx
    - PermanentAPIError: 4xx
"""

from __future__ import annotations

from typing import Optional


class RerankError(Exception):
    """Base exception voor alle rerank errors."""
    pass


class ValidationError(RerankError):
    """Ongeldige input, wordt nooit opnieuw geprobeerd."""
    pass


class ProtocolError(RerankError):
    """Backend response heeft niet de verwachte vorm."""

    def __init__(self, message: str, endpoint: Optional[str] = None, model: Optional[str] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.model = model


class BackendAPIError(RerankError):
    """
    Backend HTTP call gefaald.

    Draagt endpoint, model, status code en laatste error detail mee
    zodat de caller één beschrijvende fout ziet.
    """

    def __init__(
        self,
        message: str,
        endpoint: str,
        model: Optional[str] = None,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
        attempts: int = 1,
    ):
        self.endpoint = endpoint
        self.model = model
        self.status_code = status_code
        self.detail = detail
        self.attempts = attempts
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.args[0] if self.args else "Backend API error", f"Endpoint: {self.endpoint}"]
        if self.model:
            parts.append(f"Model: {self.model}")
        if self.detail:
            parts.append(f"Error: {self.detail}")
        return "\n".join(parts)


class TransientNetworkError(BackendAPIError):
    """Timeout, netwerk fout of 5xx."""
    pass


class PermanentAPIError(BackendAPIError):
    """4xx response: opnieuw proberen heeft geen zin."""
    pass


