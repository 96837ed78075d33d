"""Sleep advice from the Gemini text generation API.

The provider streams its answer as server-sent events. Every ``data:`` line
holds one JSON chunk; the text parts of the first candidate are collected as
fragments and joined once the stream ends. The joined text is returned as is.
"""

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
import structlog

from sleep_log_server.core.config import settings
from sleep_log_server.core.exceptions import AdviceConfigurationError, AdviceUpstreamError

logger = structlog.get_logger()

ADVICE_PROMPT = """You are a sleep coach. Below is a person's sleep log as JSON:
- "sleeps": individual sleep records (start/end timestamps and optional notes)
- "sleepStats": average sleep duration (hours) per day over the last week
- "weeklySleepStats": total sleep duration (hours) per week, weeks start on Sunday
- "hourDistributionStats": how many sleeps started and ended in each hour of the day

Analyse the sleep pattern. Point out irregular schedules, short or excessive
sleep, and naps. Finish with three concrete, practical recommendations.
Keep the answer under 300 words.

Sleep data:
{payload}
"""


def build_prompt(payload: dict[str, Any]) -> str:
    """Embed the serialized payload in the advice prompt."""
    return ADVICE_PROMPT.format(payload=json.dumps(payload, ensure_ascii=False, indent=2))


def extract_text(chunk: dict[str, Any]) -> str:
    """Return the text carried by one streamed response chunk.

    Raises:
        AdviceUpstreamError: If the chunk is not shaped like a Gemini response
    """
    try:
        candidates = chunk.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)
    except (AttributeError, TypeError, IndexError, KeyError) as e:
        raise AdviceUpstreamError("Advice provider sent malformed data") from e


class AdviceService:
    """Client for the external text generation provider."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize advice service.

        Args:
            api_key: Gemini API key (defaults to settings)
            model: Model name (defaults to settings)
            api_base: REST API base URL (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            transport: Custom httpx transport (used by tests)
        """
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.advice_model
        self.api_base = (api_base or settings.advice_api_base).rstrip("/")
        self.timeout = timeout or settings.advice_timeout_seconds
        self.transport = transport
        self.logger = logger.bind(service="advice", model=self.model)

    @property
    def stream_url(self) -> str:
        """Streaming endpoint for the configured model."""
        return f"{self.api_base}/models/{self.model}:streamGenerateContent"

    async def generate(self, payload: dict[str, Any]) -> str:
        """Generate advice for the given records and statistics.

        Args:
            payload: Records and statistics exactly as supplied by the client

        Returns:
            Provider output, unmodified

        Raises:
            AdviceConfigurationError: If no API key is configured
            AdviceUpstreamError: On transport or provider errors
        """
        if not self.api_key:
            raise AdviceConfigurationError("GEMINI_API_KEY is not configured")

        prompt = build_prompt(payload)
        self.logger.info("Requesting sleep advice", records=len(payload.get("sleeps", [])))

        fragments = [fragment async for fragment in self.stream(prompt)]
        advice = "".join(fragments)

        self.logger.info("Sleep advice received", fragments=len(fragments), length=len(advice))
        return advice

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        """Yield text fragments as the provider streams them.

        Raises:
            AdviceUpstreamError: On transport or provider errors
        """
        body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": self.api_key or ""}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                async with client.stream(
                    "POST",
                    self.stream_url,
                    params={"alt": "sse"},
                    headers=headers,
                    json=body,
                ) as response:
                    if not response.is_success:
                        await response.aread()
                        self.logger.warning(
                            "Advice provider returned error",
                            status=response.status_code,
                            body=response.text[:500],
                        )
                        raise AdviceUpstreamError(
                            f"Advice provider returned HTTP {response.status_code}"
                        )

                    async for line in response.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        data = line[len("data:") :].strip()
                        if not data:
                            continue
                        try:
                            chunk = json.loads(data)
                        except json.JSONDecodeError as e:
                            raise AdviceUpstreamError("Advice provider sent malformed data") from e
                        if not isinstance(chunk, dict):
                            raise AdviceUpstreamError("Advice provider sent malformed data")
                        if "error" in chunk:
                            error = chunk["error"]
                            message = (
                                error.get("message", "unknown error")
                                if isinstance(error, dict)
                                else str(error)
                            )
                            raise AdviceUpstreamError(f"Advice provider error: {message}")
                        text = extract_text(chunk)
                        if text:
                            yield text
        except httpx.TimeoutException as e:
            self.logger.warning("Advice request timed out", error=str(e))
            raise AdviceUpstreamError("Advice provider timed out") from e
        except httpx.HTTPError as e:
            self.logger.error("Advice request failed", error=str(e))
            raise AdviceUpstreamError(f"Advice provider unreachable: {e}") from e
