"""Time-bounded AI requests that never raise."""

import asyncio
import logging
import time

from messageflow.services.llm.base import AIExecutionResult, BaseLLMProvider

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 180.0


async def execute_ai_request(
    provider: BaseLLMProvider,
    company_name: str,
    model_name: str,
    prompt: str,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    use_online: bool = False,
) -> AIExecutionResult:
    """Run one prompt against a model, folding timeouts and errors into the result.

    The timeout only stops waiting; the upstream request is not guaranteed
    to be cancelled on the provider side.
    """
    timeout_ms = int(timeout * 1000)
    try:
        model_id = provider.model_id(company_name, model_name, use_online)
    except Exception as e:
        logger.error(f"Could not resolve model id for {company_name}/{model_name}: {e}")
        return AIExecutionResult(
            success=False,
            error=str(e) or "Unknown error occurred",
            model_used=f"{company_name}/{model_name}",
            prompt_used=prompt,
        )

    logger.info(f"Executing AI request with model {model_id} ({len(prompt)} chars, timeout {timeout_ms}ms)")
    started = time.monotonic()

    try:
        text = await asyncio.wait_for(provider.complete(model_id, prompt), timeout=timeout)
    except asyncio.TimeoutError:
        error = f"AI request timed out after {timeout_ms}ms"
        logger.error(f"AI execution failed for model {company_name}/{model_name}: {error}")
        return AIExecutionResult(success=False, error=error, model_used=model_id, prompt_used=prompt)
    except Exception as e:
        error = str(e) or "Unknown error occurred"
        logger.error(f"AI execution failed for model {company_name}/{model_name}: {error}")
        return AIExecutionResult(success=False, error=error, model_used=model_id, prompt_used=prompt)

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(f"AI request completed in {duration_ms}ms")
    return AIExecutionResult(success=True, content=text, model_used=model_id, prompt_used=prompt)
