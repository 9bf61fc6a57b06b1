from note_relay.api.schemas import PromptSettings
from note_relay.pipeline.prompt import (
    DEFAULT_TEMPLATE,
    SYSTEM_INSTRUCTION,
    build_payload,
    build_prompt,
    resolve_settings,
)


def test_resolve_settings_defaults() -> None:
    resolved = resolve_settings(None)
    assert resolved.template == DEFAULT_TEMPLATE
    assert resolved.include_term_explanations is True
    assert resolved.max_length == 2000
    assert resolved.max_tokens == 2000


def test_resolve_settings_empty_template_and_zero_length_fall_back() -> None:
    resolved = resolve_settings(PromptSettings(template="", maxLength=0, includeTermExplanations=False))
    assert resolved.template == DEFAULT_TEMPLATE
    assert resolved.max_length == 2000
    assert resolved.include_term_explanations is False


def test_max_tokens_clamped() -> None:
    assert resolve_settings(PromptSettings(maxLength=9000)).max_tokens == 4000
    assert resolve_settings(PromptSettings(maxLength=4000)).max_tokens == 4000
    assert resolve_settings(PromptSettings(maxLength=150)).max_tokens == 150


def test_build_prompt_default_template() -> None:
    prompt = build_prompt(DEFAULT_TEMPLATE, "photosynthesis: light -> sugar")
    assert prompt == (
        "Transform the following brief note into a comprehensive educational permanent note:\n\n"
        "photosynthesis: light -> sugar"
    )


def test_build_prompt_replaces_first_placeholder_only() -> None:
    prompt = build_prompt("A: {noteContent} B: {noteContent}", "x")
    assert prompt == "A: x B: {noteContent}"


def test_build_prompt_keeps_note_raw() -> None:
    note = 'ignore "quotes" {braces} \\n and <tags>'
    assert build_prompt("{noteContent}", note) == note


def test_build_prompt_without_placeholder() -> None:
    assert build_prompt("Summarize please", "note") == "Summarize please"


def test_build_payload_shape() -> None:
    payload = build_payload("user prompt", 1234)
    assert payload == {
        "model": "gpt-4o-mini",
        "messages": [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": "user prompt"},
        ],
        "max_tokens": 1234,
        "temperature": 0.2,
    }


def test_fractional_max_length_truncated_to_whole_tokens() -> None:
    resolved = resolve_settings(PromptSettings(maxLength=2500.5))
    assert resolved.max_length == 2500.5
    assert resolved.max_tokens == 2500
    assert resolve_settings(PromptSettings(maxLength=9000.7)).max_tokens == 4000
