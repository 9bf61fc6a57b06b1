import json
import logging
import math
from dataclasses import dataclass
from typing import Any

from note_relay.api.schemas import NoteRequest
from note_relay.config import Settings, get_settings
from note_relay.pipeline.errors import (
    InternalFailure,
    InvalidRequest,
    Misconfiguration,
    RelayError,
    UpstreamFailure,
)
from note_relay.pipeline.prompt import DEFAULT_TEMPLATE, build_payload, build_prompt, resolve_settings
from note_relay.providers.llm.openai import CompletionClient, OpenAIChatClient, UpstreamResponse, clip

logger = logging.getLogger(__name__)
MAX_NOTE_CHARS = 10_000
ERROR_LOG_LIMIT = 1000


@dataclass(frozen=True)
class RelayResponse:
    status_code: int
    body: Any


class RelayService:
    """Turn one inbound note request into exactly one JSON response.

    The pipeline is linear: validate, build the prompt, check the credential,
    call upstream, map upstream errors, parse the message content. Every stage
    raises a RelayError on failure and handle() converts it; handle() itself
    never raises.
    """

    def __init__(self, settings: Settings | None = None, client: CompletionClient | None = None) -> None:
        self.settings = settings or get_settings()
        self.client = client or OpenAIChatClient()

    async def handle(self, method: str, body: bytes | str) -> RelayResponse:
        try:
            return await self._relay(method, body)
        except RelayError as exc:
            logger.info("relay.rejected status=%d error=%s", exc.status_code, clip(exc.message, ERROR_LOG_LIMIT))
            return RelayResponse(status_code=exc.status_code, body=exc.as_payload())
        except Exception:
            logger.exception("relay.failed")
            failure = InternalFailure("Failed to process note with AI")
            return RelayResponse(status_code=failure.status_code, body=failure.as_payload())

    async def _relay(self, method: str, body: bytes | str) -> RelayResponse:
        if method.upper() != "POST":
            raise InvalidRequest("Method not allowed", status_code=405)

        request = self._parse_request(body)
        note_content = request.note_content
        if not note_content or not note_content.strip():
            raise InvalidRequest("Note content cannot be empty")
        if _utf16_length(note_content) > MAX_NOTE_CHARS:
            raise InvalidRequest("Note content is too long (max 10,000 characters)")

        resolved = resolve_settings(request.settings)
        prompt = build_prompt(resolved.template, note_content)
        logger.info(
            "relay.request note_chars=%d max_tokens=%d custom_template=%s",
            len(note_content),
            resolved.max_tokens,
            resolved.template != DEFAULT_TEMPLATE,
        )

        if not self.settings.has_api_key:
            raise Misconfiguration("Server misconfigured: missing OPENAI_API_KEY")

        upstream = await self.client.complete(build_payload(prompt, resolved.max_tokens), self.settings.openai_api_key)
        if not upstream.ok:
            raise self._upstream_error(upstream)

        result = self._parse_result(upstream.json())
        return RelayResponse(status_code=200, body=result)

    @staticmethod
    def _parse_request(body: bytes | str) -> NoteRequest:
        # Anything that is not a JSON object of the request shape is an internal failure.
        data = json.loads(body)
        if not isinstance(data, dict):
            raise ValueError(f"request body must be a JSON object, got {type(data).__name__}")
        return NoteRequest.model_validate(data)

    def _upstream_error(self, upstream: UpstreamResponse) -> UpstreamFailure:
        status = upstream.status_code
        if status == 401:
            message = "Invalid API key"
        elif status == 429:
            message = "Rate limit exceeded"
        elif status >= 500:
            message = "OpenAI service unavailable"
        else:
            message = upstream.text or f"Upstream error: {status}"
        logger.warning("relay.upstream_error status=%d body=%s", status, clip(upstream.text, ERROR_LOG_LIMIT))
        return UpstreamFailure(message, upstream_status=status)

    @staticmethod
    def _parse_result(data: Any) -> Any:
        text = RelayService._message_content(data).strip()
        if not text:
            raise UpstreamFailure("Empty response from AI")
        try:
            return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
        except ValueError as exc:
            raise UpstreamFailure("AI did not return valid JSON") from exc

    @staticmethod
    def _message_content(data: Any) -> str:
        if not isinstance(data, dict):
            return ""
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return ""
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return ""
        content = message.get("content")
        return content if isinstance(content, str) else ""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _finite_float(literal: str) -> float:
    # Overflowing literals such as 1e400 would otherwise become inf.
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"non-finite JSON number: {literal}")
    return value


def _utf16_length(text: str) -> int:
    """Length in UTF-16 code units, the unit client-side note limits are counted in."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2
