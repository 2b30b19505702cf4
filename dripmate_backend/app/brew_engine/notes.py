# dripmate_backend/app/brew_engine/notes.py
from __future__ import annotations

from typing import List

from .pipeline import FinalParameterSet

CATEGORY_NOTES = {
    "experimental-nitro": "Nitro process - very delicate, preserve volatile compounds",
    "anaerobic-natural": "Anaerobic natural - funky & fruity, control extraction",
    "anaerobic-washed": "Anaerobic washed - clean but complex, cooler temp",
    "carbonic": "Carbonic maceration - wine-like characteristics, slow extraction",
    "extended-fermentation": "Extended fermentation - intense flavors, careful extraction",
    "yeast": "Yeast inoculated - unique fermentation notes, standard approach",
    "honey": "Honey process - sweet & fruity, balanced extraction",
    "natural": "Natural process - full fruit body, coarser grind",
    "washed": "Washed process - clean & bright, standard parameters",
}

def generate_brew_notes(params: FinalParameterSet) -> List[str]:
    """One sentence per stage that actually shifted something worth telling the user."""
    t = params.trace
    notes = [CATEGORY_NOTES.get(params.category, "Standard brewing approach")]

    band = t.get("altitude", {}).get("band")
    if band == "high":
        notes.append("High altitude beans - very dense, ground finer")
    elif band == "low":
        notes.append("Low altitude beans - softer, ground coarser")

    cultivar = t.get("cultivar", {}).get("category")
    if cultivar == "delicate":
        notes.append("Delicate cultivar - gentle extraction, lower temp")
    elif cultivar == "robust":
        notes.append("Robust cultivar - can handle higher temps & coarser grind")

    region = t.get("origin", {}).get("region")
    if region == "africa":
        notes.append("African origin - floral notes, finer grind")
    elif region == "asia":
        notes.append("Asian origin - earthy body, coarser grind")

    water = t.get("water", {}).get("category")
    if water in ("very_soft", "soft"):
        notes.append("Soft water - ground finer, higher temp")
    elif water in ("hard", "very_hard"):
        notes.append("Hard water - ground coarser, consider filtering")

    stage = t.get("roast", {}).get("stage")
    if stage == "resting":
        notes.append("Freshly roasted - still degassing, slightly cooler water")
    elif stage == "fading":
        notes.append("Roast is fading - slightly hotter water to lift sweetness")

    method = t.get("method", {}).get("method")
    if method == "chemex":
        notes.append("Chemex - thick filter, coarser grind and longer drawdown")
    elif method == "aeropress":
        notes.append("AeroPress - immersion, finer grind and shorter contact time")

    return notes

__all__ = ["CATEGORY_NOTES", "generate_brew_notes"]
