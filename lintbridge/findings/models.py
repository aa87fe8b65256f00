# Pydantic data models for diagnostics: Span and Diagnostic.

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class Span(BaseModel):
    """Byte-offset range into the original source (lo inclusive, hi exclusive)."""

    lo: int = Field(..., ge=0, description="start byte offset")
    hi: int = Field(..., ge=0, description="end byte offset")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_order(self) -> "Span":
        if self.hi < self.lo:
            raise ValueError(f"span end {self.hi} precedes start {self.lo}")
        return self


class Diagnostic(BaseModel):
    """A single finding reported by a rule (native or plugin)."""

    rule_code: str
    span: Span
    message: str
    hint: Optional[str] = None

    model_config = {"frozen": True}
