"""LLM access, prompts and the civic assistant."""

from .llm_config import LLMClient, LLMSettings, get_llm_client

__all__ = ["LLMClient", "LLMSettings", "get_llm_client"]
