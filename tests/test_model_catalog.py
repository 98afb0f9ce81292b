"""
Tests voor model presets en de Ollama model lijst.
"""
import pytest
import requests

import model_catalog
from model_catalog import MODEL_PRESETS, get_catalog, list_ollama_models, resolve_model_name
from rerank_errors import ValidationError


class FakeResponse:
    def __init__(self, data, status_code=200):
        self._data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self._data


def test_presets():
    values = [p.value for p in MODEL_PRESETS]
    assert values[0] == "bge-reranker-v2-m3"
    assert "dengcao/Qwen3-Reranker-4B:Q5_K_M" in values
    assert values[-1] == "custom"


def test_resolve_preset():
    assert resolve_model_name("bge-reranker-v2-m3") == "bge-reranker-v2-m3"


def test_resolve_custom():
    assert resolve_model_name("custom", "  my-reranker:latest ") == "my-reranker:latest"


def test_custom_without_name():
    with pytest.raises(ValidationError, match="Custom model name is required"):
        resolve_model_name("custom", "")


def test_list_models(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return FakeResponse({"models": [{"name": "bge-reranker-v2-m3:latest"}, {"name": "llama3"}]})

    monkeypatch.setattr(model_catalog.requests, "get", fake_get)

    assert list_ollama_models("http://ollama.test/") == ["bge-reranker-v2-m3:latest", "llama3"]
    assert calls == ["http://ollama.test/api/tags"]


def test_list_models_unreachable(monkeypatch):
    def fake_get(url, timeout):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(model_catalog.requests, "get", fake_get)

    assert list_ollama_models("http://ollama.test") == []


def test_list_models_http_error(monkeypatch):
    monkeypatch.setattr(model_catalog.requests, "get", lambda url, timeout: FakeResponse({}, status_code=500))

    assert list_ollama_models("http://ollama.test") == []


def test_catalog_marks_installed_presets(monkeypatch):
    monkeypatch.setattr(
        model_catalog.requests,
        "get",
        lambda url, timeout: FakeResponse({"models": [{"name": "bge-reranker-v2-m3:latest"}]}),
    )

    catalog = get_catalog("http://ollama.test")

    assert catalog["installed_presets"] == ["bge-reranker-v2-m3"]
    assert len(catalog["presets"]) == len(MODEL_PRESETS)
