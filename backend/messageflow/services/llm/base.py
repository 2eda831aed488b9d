"""Abstract LLM provider interface. All providers must implement this."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class AIExecutionResult:
    success: bool
    content: str | None = None
    error: str | None = None
    model_used: str = ""
    prompt_used: str = ""


def generate_model_id(company_name: str, model_name: str, use_online: bool = False) -> str:
    """Build a provider-routable model id such as ``openai/gpt-4o``.

    Online mode appends ``:online`` so the router augments the request with
    web search results.
    """
    base_id = f"{company_name}/{model_name}"
    if use_online:
        return f"{base_id}:online"
    return base_id


class BaseLLMProvider(ABC):
    def model_id(self, company_name: str, model_name: str, use_online: bool = False) -> str:
        return generate_model_id(company_name, model_name, use_online)

    @abstractmethod
    async def complete(self, model_id: str, prompt: str) -> str:
        """Send a single prompt and return the generated text. Raises on failure."""
        ...
