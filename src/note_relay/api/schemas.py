from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PromptSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    template: str | None = Field(
        default=None,
        description="Prompt template; the first {noteContent} token is replaced with the note.",
    )
    # Accepted as sent; nothing downstream reads it.
    include_term_explanations: Any = Field(default=None, alias="includeTermExplanations")
    max_length: float | None = Field(
        default=None,
        alias="maxLength",
        description="Token cap for the completion, clamped to 4000.",
    )


class NoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    note_content: str | None = Field(default=None, alias="noteContent")
    settings: PromptSettings | None = None


class NoteResult(BaseModel):
    title: str
    content: str
    keywords: list[str]


class ErrorResult(BaseModel):
    error: str
    status: int | None = None
