"""
LiteLLM Configuration Module

This module provides a unified interface to multiple LLM providers using LiteLLM.
LiteLLM supports 100+ LLM providers with a consistent OpenAI-compatible API.

Environment variables:
- LLM_PROVIDER: Provider name (e.g., "openai", "anthropic", "azure")
- LLM_MODEL: Model used for answers (e.g., "gpt-4o-mini")
- LLM_API_KEY: API key for the provider (or provider-specific key like OPENAI_API_KEY)
- LLM_BASE_URL: (Optional) Custom base URL for self-hosted or proxy endpoints
- LLM_MAX_TOKENS: (Optional) Max tokens for responses (default: 1500)
- LLM_TEMPERATURE: (Optional) Temperature for answers (default: 0.3)
"""

from typing import Any, Dict, List, Optional

import litellm
from litellm import acompletion, completion
from pydantic import Field
from pydantic_settings import BaseSettings


class LLMSettings(BaseSettings):
    """LLM configuration settings"""

    # Provider and model
    llm_provider: str = Field(default="openai", description="LLM provider name")
    llm_model: str = Field(default="gpt-4o-mini", description="Model identifier")

    # API credentials
    llm_api_key: Optional[str] = Field(default=None, description="API key for LLM provider")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    azure_api_key: Optional[str] = Field(default=None, description="Azure API key")
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key")

    # Optional configuration
    llm_base_url: Optional[str] = Field(default=None, description="Custom base URL")
    llm_max_tokens: int = Field(default=1500, description="Max tokens for completion")
    llm_temperature: float = Field(default=0.3, description="Temperature for answers")
    llm_timeout: int = Field(default=60, description="Request timeout in seconds")

    # LiteLLM specific settings
    litellm_log_level: str = Field(default="ERROR", description="LiteLLM log level")
    litellm_drop_params: bool = Field(
        default=True,
        description="Drop unsupported params for each provider"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields from .env


class LLMClient:
    """
    Unified LLM client using LiteLLM.

    Supports streaming, async operations and per-call model overrides
    (the classifier and summariser use their own models).
    """

    def __init__(self, settings: Optional[LLMSettings] = None):
        """
        Initialize LLM client.

        Args:
            settings: LLM settings (defaults to loading from environment)
        """
        self.settings = settings or LLMSettings()

        # Configure LiteLLM
        litellm.drop_params = self.settings.litellm_drop_params
        litellm.set_verbose = self.settings.litellm_log_level == "DEBUG"

        # Set API key based on provider
        self._configure_api_key()

        # Build model string (provider/model format for LiteLLM)
        self.model = self.build_model_string(self.settings.llm_model)

    def _configure_api_key(self):
        """Set API key for the selected provider"""
        provider = self.settings.llm_provider.lower()

        # Priority: provider-specific key > generic llm_api_key
        if provider == "anthropic":
            key = self.settings.anthropic_api_key or self.settings.llm_api_key
            if key:
                litellm.api_key = key
        elif provider == "openai":
            key = self.settings.openai_api_key or self.settings.llm_api_key
            if key:
                litellm.openai_key = key
        elif provider == "azure":
            key = self.settings.azure_api_key or self.settings.llm_api_key
            if key:
                litellm.azure_key = key
        elif provider == "gemini" or provider == "google":
            key = self.settings.gemini_api_key or self.settings.llm_api_key
            if key:
                litellm.gemini_api_key = key
        else:
            # Generic fallback
            if self.settings.llm_api_key:
                litellm.api_key = self.settings.llm_api_key

    def build_model_string(self, model: str) -> str:
        """
        Build LiteLLM model string.

        Format: "provider/model" or just "model" for OpenAI-compatible APIs

        Examples:
        - "gpt-4o-mini" (OpenAI default)
        - "azure/gpt-4o"
        - "claude-3-5-sonnet-20241022" (auto-detected as Anthropic)
        """
        provider = self.settings.llm_provider.lower()

        if provider in ["azure", "bedrock", "vertex_ai", "gemini"]:
            return f"{provider}/{model}"

        # OpenAI, Anthropic and OpenAI-compatible APIs use model name directly
        return model

    def _params(
        self,
        messages: List[Dict[str, str]],
        stream: bool,
        model: Optional[str],
        kwargs: Dict[str, Any]
    ) -> Dict[str, Any]:
        params = {
            "model": self.build_model_string(model) if model else self.model,
            "messages": messages,
            "max_tokens": kwargs.get("max_tokens", self.settings.llm_max_tokens),
            "temperature": kwargs.get("temperature", self.settings.llm_temperature),
            "timeout": kwargs.get("timeout", self.settings.llm_timeout),
            "stream": stream,
        }

        # Add base URL if configured
        if self.settings.llm_base_url:
            params["api_base"] = self.settings.llm_base_url

        # Merge additional kwargs
        params.update({k: v for k, v in kwargs.items() if k not in params})
        return params

    def complete(
        self,
        messages: List[Dict[str, str]],
        stream: bool = False,
        model: Optional[str] = None,
        **kwargs
    ) -> Any:
        """
        Generate completion using LiteLLM.

        Args:
            messages: List of message dicts with 'role' and 'content'
            stream: Whether to stream the response
            model: Override the configured model for this call
            **kwargs: Additional parameters to pass to litellm.completion()

        Returns:
            LiteLLM completion response or stream
        """
        return completion(**self._params(messages, stream, model, kwargs))

    async def acomplete(
        self,
        messages: List[Dict[str, str]],
        stream: bool = False,
        model: Optional[str] = None,
        **kwargs
    ) -> Any:
        """
        Async version of complete().

        Same parameters as complete() but returns awaitable.
        """
        return await acompletion(**self._params(messages, stream, model, kwargs))


def response_text(response: Any) -> str:
    """Text content of a non-streamed completion ('' if absent)."""
    return (response.choices[0].message.content or "").strip()


# Singleton instance for easy import
_default_client: Optional[LLMClient] = None


def get_llm_client(settings: Optional[LLMSettings] = None) -> LLMClient:
    """
    Get or create the default LLM client.

    Args:
        settings: Optional settings (creates new client if provided)

    Returns:
        LLM client instance
    """
    global _default_client

    if settings is not None:
        return LLMClient(settings)

    if _default_client is None:
        _default_client = LLMClient()

    return _default_client
