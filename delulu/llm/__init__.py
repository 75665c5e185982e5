"""Chat-completion client for OpenAI-compatible endpoints."""
from .completion import CompletionClient

__all__ = ["CompletionClient"]
