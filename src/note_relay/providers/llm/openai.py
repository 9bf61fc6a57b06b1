import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)
CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
PAYLOAD_LOG_LIMIT = 4000


def clip(text: str, limit: int) -> str:
    normalized = " ".join(text.split()).strip()
    if len(normalized) <= limit:
        return normalized
    return f"{normalized[:limit]}...(truncated)"


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.text)


class CompletionClient(Protocol):
    async def complete(self, payload: dict[str, Any], api_key: str) -> UpstreamResponse: ...


class OpenAIChatClient:
    """OpenAI chat completions over httpx; one POST per call, no retries."""

    def __init__(self, url: str = CHAT_COMPLETIONS_URL, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.url = url
        self.transport = transport

    async def complete(self, payload: dict[str, Any], api_key: str) -> UpstreamResponse:
        logger.info(
            "openai.request model=%s max_tokens=%s prompt_chars=%d",
            payload.get("model"),
            payload.get("max_tokens"),
            sum(len(str(message.get("content", ""))) for message in payload.get("messages", [])),
        )
        logger.debug("openai.request.payload=%s", clip(self._to_json(payload), PAYLOAD_LOG_LIMIT))

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        # timeout=None: cancellation belongs to the hosting runtime
        async with httpx.AsyncClient(timeout=None, transport=self.transport) as client:
            http_response = await client.post(self.url, json=payload, headers=headers)
            text = http_response.text

        logger.info("openai.response status=%d chars=%d", http_response.status_code, len(text))
        logger.debug("openai.response.payload=%s", clip(text, PAYLOAD_LOG_LIMIT))
        return UpstreamResponse(status_code=http_response.status_code, text=text)

    @staticmethod
    def _to_json(payload: Any) -> str:
        try:
            return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError):
            return str(payload)
