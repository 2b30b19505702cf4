# schemas.py  (enums shared by engine, models and routers)

from __future__ import annotations
from enum import Enum


# ===================== Enums =====================

class GrinderModel(str, Enum):
    ZPRESSO_JX = "1zpresso"
    BARATZA_ENCORE = "baratza"
    COMANDANTE_MK3 = "comandante_mk3"
    COMANDANTE_MK4 = "comandante_mk4"
    FELLOW_GEN1 = "fellow_gen1"
    FELLOW_GEN2 = "fellow_gen2"
    TIMEMORE_C2 = "timemore_c2"
    TIMEMORE_S3 = "timemore_s3"

class GrindUnit(str, Enum):
    CLICKS = "clicks"
    STEPPED_DECIMAL = "stepped-decimal"
    ROTATIONS = "rotations"
    INTEGER_SCALE = "integer-scale"

class BrewMethod(str, Enum):
    V60 = "v60"
    CHEMEX = "chemex"
    AEROPRESS = "aeropress"

class BrewStyle(str, Enum):
    SLOW = "slow"
    FRUITY = "fruity"
    STANDARD = "standard"
    CONTROLLED = "controlled"

class WaterCategory(str, Enum):
    VERY_SOFT = "very_soft"
    SOFT = "soft"
    MEDIUM = "medium"
    HARD = "hard"
    VERY_HARD = "very_hard"

class RoastStage(str, Enum):
    RESTING = "resting"
    SWEET = "sweet"
    FADING = "fading"
    UNKNOWN = "unknown"

class FeedbackCategory(str, Enum):
    BITTERNESS = "bitterness"
    SWEETNESS = "sweetness"
    ACIDITY = "acidity"
    BODY = "body"

class FeedbackLevel(str, Enum):
    LOW = "low"
    BALANCED = "balanced"
    HIGH = "high"

class AdjustKind(str, Enum):
    GRIND = "grind"
    TEMP = "temp"


CUPPING_CATEGORIES = tuple(c.value for c in FeedbackCategory)
FEEDBACK_LEVELS = tuple(l.value for l in FeedbackLevel)

__all__ = [
    "GrinderModel", "GrindUnit", "BrewMethod", "BrewStyle", "WaterCategory",
    "RoastStage", "FeedbackCategory", "FeedbackLevel", "AdjustKind",
    "CUPPING_CATEGORIES", "FEEDBACK_LEVELS",
]
