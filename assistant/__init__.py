"""Chat-Assistent (externes LLM, nur lesend)."""

from .client import AssistantClient, build_context

__all__ = ["AssistantClient", "build_context"]
