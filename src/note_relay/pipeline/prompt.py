from dataclasses import dataclass
from typing import Any

from note_relay.api.schemas import PromptSettings

PLACEHOLDER = "{noteContent}"
DEFAULT_TEMPLATE = (
    "Transform the following brief note into a comprehensive educational permanent note:\n\n" + PLACEHOLDER
)
DEFAULT_MAX_LENGTH = 2000
MAX_TOKENS_CAP = 4000
MODEL = "gpt-4o-mini"
TEMPERATURE = 0.2

SYSTEM_INSTRUCTION = """You are a helpful assistant that transforms brief notes into comprehensive, educational permanent notes.

CRITICAL: You MUST respond with valid JSON in this exact format:
{
  "title": "A concise, descriptive title for the note",
  "content": "The comprehensive, well-structured permanent note content",
  "keywords": ["keyword1", "keyword2", "keyword3"]
}

Requirements:
- title: Short, clear title (5-10 words max)
- content: Full transformed note with depth and clarity
- keywords: 3-7 relevant keywords for categorization
- ONLY return valid JSON, no additional text or markdown
- Focus on clarity, depth, and educational value
- IMPORTANT: DO NOT extrapolate or add information beyond what's in the original note."""


@dataclass(frozen=True)
class ResolvedSettings:
    template: str
    include_term_explanations: Any
    max_length: float

    @property
    def max_tokens(self) -> int:
        # Whole tokens; fractional lengths are truncated.
        return int(min(self.max_length, MAX_TOKENS_CAP))


def resolve_settings(settings: PromptSettings | None) -> ResolvedSettings:
    """Fill in defaults; an empty template or a zero max length counts as unset."""
    settings = settings or PromptSettings()
    include = settings.include_term_explanations
    return ResolvedSettings(
        template=settings.template or DEFAULT_TEMPLATE,
        include_term_explanations=True if include is None else include,
        max_length=settings.max_length or DEFAULT_MAX_LENGTH,
    )


def build_prompt(template: str, note_content: str) -> str:
    # Only the first token is substituted; the note text goes in unescaped.
    return template.replace(PLACEHOLDER, note_content, 1)


def build_payload(prompt: str, max_tokens: int) -> dict:
    return {
        "model": MODEL,
        "messages": [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": prompt},
        ],
        "max_tokens": max_tokens,
        "temperature": TEMPERATURE,
    }
