"""Schemas for the JSON arrays returned by the LLM."""

import json
import re
from dataclasses import dataclass, field
from typing import Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator


_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


class RelevanceVerdict(BaseModel):
    """One scored entry of a relevance batch."""

    index: int
    score: float = Field(ge=0.0, le=1.0)
    reason: str = ""

    @field_validator("reason", mode="before")
    @classmethod
    def _text(cls, value) -> str:
        return str(value or "").strip()


class GlossEntry(BaseModel):
    """One summarized entry of a summarization or rewrite batch."""

    index: int
    summary: str = ""

    @field_validator("summary", mode="before")
    @classmethod
    def _text(cls, value) -> str:
        return str(value or "").strip()


T = TypeVar("T", bound=BaseModel)


@dataclass
class ParseResult(Generic[T]):
    """Either the validated entries (ok) or the reason they were rejected."""
    ok: bool
    entries: List[T] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def success(cls, entries: List[T]) -> 'ParseResult[T]':
        return cls(ok=True, entries=entries)

    @classmethod
    def malformed(cls, error: str) -> 'ParseResult[T]':
        return cls(ok=False, error=error)


def parse_json_array(text: Optional[str], model: Type[T]) -> ParseResult[T]:
    """
    Extract the first JSON array in a completion and validate every entry.

    Args:
        text: Raw completion text, possibly wrapped in prose or code fences
        model: Entry schema

    Returns:
        ParseResult; any schema violation rejects the whole array
    """
    if not text:
        return ParseResult.malformed("empty response")

    match = _JSON_ARRAY.search(text)
    if not match:
        return ParseResult.malformed("no JSON array in response")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        return ParseResult.malformed(f"invalid JSON: {e}")

    try:
        entries = TypeAdapter(List[model]).validate_python(data)
    except ValidationError as e:
        return ParseResult.malformed(f"schema violation: {e.error_count()} errors")

    return ParseResult.success(entries)
