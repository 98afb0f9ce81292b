"""
Model Families

Verzameling van alle ondersteunde reranker model families.
"""
from .bge import BGEFamily
from .qwen import QwenFamily
from .generic import GenericFamily

__all__ = [
    "BGEFamily",
    "QwenFamily",
    "GenericFamily",
]
