# dripmate_backend/app/models/coffee.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Wire/storage format keeps the camelCase keys the clients already send
# (customAmount, grindOffset, feedbackHistory, ...).
_WIRE = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow", coerce_numbers_to_str=True)


class HistoryEntry(BaseModel):
    timestamp: str
    previous_grind: Optional[str] = None
    previous_temp: Optional[str] = None
    new_grind: Optional[str] = None
    new_temp: Optional[str] = None
    grind_offset_delta: int = 0
    custom_temp_applied: Optional[str] = None
    manual_adjust: Optional[Literal["grind", "temp"]] = None
    reset_to_initial: Optional[bool] = None

    model_config = _WIRE


class Coffee(BaseModel):
    id: Optional[str] = None

    # descriptive
    name: str = ""
    origin: str = ""
    process: str = ""
    cultivar: str = ""
    altitude: str = ""
    roaster: str = ""
    tasting_notes: Optional[str] = None

    # lifecycle
    added_date: Optional[str] = None
    deleted: bool = False
    deleted_at: Optional[str] = None
    favorite: bool = False
    favorited_at: Optional[str] = None

    # user overrides layered onto the engine baseline
    custom_amount: Optional[float] = None
    grind_offset: Optional[int] = None
    custom_temp: Optional[str] = None
    custom_grind: Optional[str] = None  # legacy, only ever wiped
    roast_date: Optional[str] = None

    # engine baseline anchors
    initial_grind: Optional[str] = None
    initial_temp: Optional[str] = None

    # tasting loop
    feedback: Optional[Dict[str, str]] = None
    feedback_history: List[HistoryEntry] = Field(default_factory=list)

    model_config = _WIRE

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class CoffeeIn(Coffee):
    """Create/preview body; a dose, when sent, must be positive."""
    custom_amount: Optional[float] = Field(default=None, gt=0)


class CoffeePatch(BaseModel):
    """Fields a client may edit directly; everything else goes through the engine."""
    name: Optional[str] = None
    origin: Optional[str] = None
    process: Optional[str] = None
    cultivar: Optional[str] = None
    altitude: Optional[str] = None
    roaster: Optional[str] = None
    tasting_notes: Optional[str] = None
    custom_amount: Optional[float] = Field(default=None, gt=0)
    roast_date: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


__all__ = ["HistoryEntry", "Coffee", "CoffeeIn", "CoffeePatch"]
