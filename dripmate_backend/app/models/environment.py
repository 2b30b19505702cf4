# dripmate_backend/app/models/environment.py
from __future__ import annotations

from datetime import date
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dripmate_backend.app.config.manifest import DEFAULT_DOSE_G
from dripmate_backend.app.schemas import BrewMethod, GrinderModel, WaterCategory


class WaterHardness(BaseModel):
    value: float
    category: Optional[WaterCategory] = None
    region: Optional[str] = None
    source: Optional[str] = None
    is_manual: Optional[bool] = None
    is_estimate: Optional[bool] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


def _coerce_grinder(v: Any) -> Any:
    if isinstance(v, GrinderModel):
        return v
    from dripmate_backend.app.brew_engine.grinders import migrate_grinder_key
    return migrate_grinder_key(None if v is None else str(v))

def coerce_method(v: Any) -> Any:
    if isinstance(v, BrewMethod):
        return v
    try:
        return BrewMethod(str(v or "").strip().lower())
    except ValueError:
        return BrewMethod.V60


class Environment(BaseModel):
    """
    Process-wide brewing context. Passed explicitly into every engine call
    instead of living in module globals.
    """
    grinder: GrinderModel = GrinderModel.FELLOW_GEN2
    method: BrewMethod = BrewMethod.V60
    manual_water_hardness: Optional[WaterHardness] = None
    api_water_hardness: Optional[WaterHardness] = None
    default_dose: float = Field(default=DEFAULT_DOSE_G, gt=0)
    today: Optional[date] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("grinder", mode="before")
    @classmethod
    def migrate_grinder(cls, v: Any) -> Any:
        return _coerce_grinder(v)

    @field_validator("method", mode="before")
    @classmethod
    def fallback_method(cls, v: Any) -> Any:
        return coerce_method(v)

    @property
    def active_water_hardness(self) -> Optional[WaterHardness]:
        # manual entry wins over the postal-code lookup
        return self.manual_water_hardness or self.api_water_hardness


class Settings(Environment):
    """Persisted environment plus device/sync state."""
    zip_code: Optional[str] = None
    token: Optional[str] = None
    device_id: Optional[str] = None

    # the calendar day is supplied per call, never stored
    today: Optional[date] = Field(default=None, exclude=True)

    @field_validator("today", mode="before")
    @classmethod
    def drop_stored_today(cls, v: Any) -> Any:
        return None

    def environment(self, today: Optional[date] = None) -> Environment:
        return Environment(
            grinder=self.grinder,
            method=self.method,
            manual_water_hardness=self.manual_water_hardness,
            api_water_hardness=self.api_water_hardness,
            default_dose=self.default_dose,
            today=today,
        )


class SettingsUpdate(BaseModel):
    """Partial settings edit; omitted fields stay as they are."""
    grinder: Optional[str] = None
    method: Optional[str] = None
    default_dose: Optional[float] = Field(default=None, gt=0)
    manual_water_hardness: Optional[float] = None
    token: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ZipCodeIn(BaseModel):
    zip_code: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


__all__ = ["WaterHardness", "Environment", "Settings", "SettingsUpdate", "ZipCodeIn"]
