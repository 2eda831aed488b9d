"""LLM provider factory."""

from messageflow.core.config import Settings, settings
from messageflow.services.llm.base import BaseLLMProvider


def get_llm_provider(config: Settings = settings) -> BaseLLMProvider:
    """Factory function that returns the configured LLM provider."""
    if config.llm_provider == "openrouter":
        from messageflow.services.llm.openrouter import OpenRouterProvider
        return OpenRouterProvider(
            api_key=config.openrouter_api_key,
            base_url=config.openrouter_base_url,
            timeout=config.ai_request_timeout,
        )
    elif config.llm_provider == "gemini":
        from messageflow.services.llm.gemini import GeminiProvider
        return GeminiProvider(api_key=config.gemini_api_key)
    else:
        raise ValueError(f"Unknown LLM provider: {config.llm_provider}")
