"""Google Gemini LLM provider."""

from google import genai

from messageflow.services.llm.base import BaseLLMProvider


class GeminiProvider(BaseLLMProvider):
    def __init__(self, api_key: str):
        self.client = genai.Client(api_key=api_key)

    def model_id(self, company_name: str, model_name: str, use_online: bool = False) -> str:
        # Gemini addresses models by bare name; there is no online variant.
        return model_name

    async def complete(self, model_id: str, prompt: str) -> str:
        response = await self.client.aio.models.generate_content(
            model=model_id,
            contents=prompt,
        )
        return response.text or ""
