"""Uniform response envelope."""

from typing import Any

from pydantic import BaseModel, Field


class Envelope(BaseModel):
    """Every response body: a human-readable message plus the payload."""

    message: str = Field(..., description="Outcome description")
    data: Any = Field(default_factory=list, description="Document(s), count, or [] / {} on errors")


__all__ = ["Envelope"]
