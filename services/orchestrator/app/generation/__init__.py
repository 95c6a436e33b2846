from .client import GenerationClient

__all__ = ["GenerationClient"]
