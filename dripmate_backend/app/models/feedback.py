# dripmate_backend/app/models/feedback.py
from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class FeedbackIn(BaseModel):
    """One cupping tag, either as a level or as a 0-100 slider position."""
    category: str
    value: Optional[str] = None
    slider: Optional[float] = Field(default=None, ge=0, le=100)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="after")
    def needs_value(self) -> "FeedbackIn":
        if self.value is None and self.slider is None:
            raise ValueError("either value or slider is required")
        return self


class AdjustIn(BaseModel):
    kind: str           # "grind" | "temp"
    delta: int

    model_config = ConfigDict(extra="allow")


__all__ = ["FeedbackIn", "AdjustIn"]
