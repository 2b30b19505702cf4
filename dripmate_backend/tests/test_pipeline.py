from datetime import date

from dripmate_backend.app.brew_engine.pipeline import (
    base_params_for_process,
    compute_final_parameters,
    parse_altitude,
    water_category_for_value,
)
from dripmate_backend.app.brew_engine.recommend import compute_brew_parameters
from dripmate_backend.app.models.environment import WaterHardness
from dripmate_backend.app.schemas import BrewMethod, BrewStyle, GrinderModel, WaterCategory

import pytest


def test_washed_reference_point_on_comandante(washed, env):
    rec = compute_brew_parameters(washed, env)
    assert rec.grind_setting == "22 clicks"
    assert rec.temperature == "92-93°C"
    assert rec.ratio_label == "1:16 (15g)"
    assert rec.water_amount_ml == 240
    assert rec.target_time == "2:30-3:00"
    assert rec.parameters.category == "washed"

def test_african_origin_grinds_one_click_finer(washed, env):
    eth = washed.model_copy(update={"origin": "Ethiopia"})
    assert compute_brew_parameters(eth, env).grind_setting == "21 clicks"

@pytest.mark.parametrize("process,category,clicks", [
    ("Nitro washed", "experimental-nitro", 18),
    ("Anaerobic Natural", "anaerobic-natural", 20),
    ("natural anaerobic", "anaerobic-natural", 20),
    ("Anaerobic Washed", "anaerobic-washed", 19),
    ("Carbonic maceration natural", "carbonic", 20),
    ("Extended fermentation", "extended-fermentation", 21),
    ("Yeast inoculated", "yeast", 23),
    ("Yellow Honey", "honey", 23),
    ("Black Honey", "honey", 26),
    ("Honey", "honey", 24),
    ("Natural", "natural", 25),
    ("Washed", "washed", 22),
    ("", "washed", 22),
    ("something new", "washed", 22),
])
def test_process_priority(process, category, clicks):
    p = base_params_for_process(process)
    assert p.category == category
    assert p.grind_base.clicks == clicks

def test_nitro_base_params():
    p = base_params_for_process("CO2 infused")
    assert p.ratio == 15.5
    assert p.brew_style == BrewStyle.SLOW
    assert (p.temp_base.min, p.temp_base.max) == (90, 91)

@pytest.mark.parametrize("raw,expected", [
    ("1800 masl", 1800),
    ("2000", 2000),
    ("", 1500),
    (None, 1500),
    ("0", 1500),
    ("high up", 1500),
    ("1650-1800", 1650),
])
def test_parse_altitude(raw, expected):
    assert parse_altitude(raw) == expected

def test_high_altitude_goes_finer_and_hotter(washed, env):
    high = washed.model_copy(update={"altitude": "2000"})
    p = compute_final_parameters(high, env)
    assert p.grind_base.clicks == 20
    assert p.grind_base.steps == pytest.approx(3.0)
    assert (p.temp_base.min, p.temp_base.max) == (93, 94)
    assert p.trace["altitude"]["band"] == "high"

def test_low_altitude_goes_coarser_and_cooler(washed, env):
    low = washed.model_copy(update={"altitude": "900"})
    p = compute_final_parameters(low, env)
    assert p.grind_base.clicks == 24
    assert (p.temp_base.min, p.temp_base.max) == (91, 92)

@pytest.mark.parametrize("below,at", [(1199, 1200), (1399, 1400), (1599, 1600), (1799, 1800)])
def test_crossing_an_altitude_band_moves_grind_by_the_band_delta(washed, env, below, at):
    lower = compute_final_parameters(washed.model_copy(update={"altitude": str(below)}), env)
    upper = compute_final_parameters(washed.model_copy(update={"altitude": str(at)}), env)
    expected = lower.trace["altitude"]["grind_adjust"] - upper.trace["altitude"]["grind_adjust"]
    assert expected == 1
    assert lower.grind_base.clicks - upper.grind_base.clicks == expected
    assert lower.trace["altitude"]["band"] != upper.trace["altitude"]["band"]

def test_grind_never_gets_coarser_with_altitude(washed, env):
    clicks = [compute_final_parameters(washed.model_copy(update={"altitude": str(a)}), env).grind_base.clicks
              for a in range(800, 2600, 50)]
    assert clicks == sorted(clicks, reverse=True)

def test_stages_accumulate_for_ethiopian_gesha(ethiopia_natural, env):
    p = compute_final_parameters(ethiopia_natural, env)
    # natural 25 -> high -2 -> delicate -1 -> africa -1
    assert p.grind_base.clicks == 21
    assert p.grind_base.steps == pytest.approx(3.1)
    assert (p.temp_base.min, p.temp_base.max) == (93, 94)
    assert p.trace["cultivar"]["category"] == "delicate"
    assert p.trace["origin"]["region"] == "africa"

def test_asian_robust_moves_coarser_and_hotter(washed, env):
    c = washed.model_copy(update={"origin": "Sumatra", "cultivar": "Catimor"})
    p = compute_final_parameters(c, env)
    assert p.grind_base.clicks == 24
    assert (p.temp_base.min, p.temp_base.max) == (94, 95)

@pytest.mark.parametrize("value,category", [
    (0, WaterCategory.VERY_SOFT),
    (6.9, WaterCategory.VERY_SOFT),
    (7, WaterCategory.SOFT),
    (13.9, WaterCategory.SOFT),
    (14, WaterCategory.MEDIUM),
    (20.9, WaterCategory.MEDIUM),
    (21, WaterCategory.HARD),
    (27.9, WaterCategory.HARD),
    (28, WaterCategory.VERY_HARD),
])
def test_water_category_thresholds(value, category):
    assert water_category_for_value(value) == category

def test_no_water_stage_without_hardness(washed, env):
    p = compute_final_parameters(washed, env)
    assert "water" not in p.trace

def test_soft_water_finer_and_hotter(washed, make_env, soft_water):
    p = compute_final_parameters(washed, make_env(api_water_hardness=soft_water))
    assert p.grind_base.clicks == 20
    assert p.grind_base.steps == pytest.approx(2.5)
    assert (p.temp_base.min, p.temp_base.max) == (93, 94)

def test_manual_hardness_wins_over_api(washed, make_env, soft_water, hard_water):
    p = compute_final_parameters(washed, make_env(manual_water_hardness=hard_water, api_water_hardness=soft_water))
    assert p.trace["water"]["category"] == "hard"
    assert p.grind_base.clicks == 24
    assert (p.temp_base.min, p.temp_base.max) == (91, 92)

def test_explicit_water_category_is_used(washed, make_env):
    hw = WaterHardness(value=10, category=WaterCategory.MEDIUM)
    p = compute_final_parameters(washed, make_env(api_water_hardness=hw))
    assert p.grind_base.clicks == 22

@pytest.mark.parametrize("roast_date,stage,temp", [
    ("2026-01-17", "resting", (91, 92)),
    ("2026-01-10", "sweet", (92, 93)),
    ("2025-12-01", "fading", (93, 94)),
    ("2026-02-01", "unknown", (92, 93)),
    ("not a date", "unknown", (92, 93)),
    (None, "unknown", (92, 93)),
])
def test_roast_age_moves_temp_by_at_most_one(washed, env, roast_date, stage, temp):
    c = washed.model_copy(update={"roast_date": roast_date})
    p = compute_final_parameters(c, env)
    assert p.trace["roast"]["stage"] == stage
    assert (p.temp_base.min, p.temp_base.max) == temp

def test_chemex_override(washed, make_env):
    p = compute_final_parameters(washed, make_env(method=BrewMethod.CHEMEX))
    assert p.grind_base.clicks == 26
    assert p.ratio == 16.5
    assert (p.temp_base.min, p.temp_base.max) == (93, 94)
    assert p.target_time == "3:30-4:30"

def test_chemex_keeps_higher_ratio():
    from dripmate_backend.app.brew_engine.pipeline import adjust_for_method
    p = adjust_for_method(base_params_for_process("natural"), BrewMethod.CHEMEX)
    assert p.ratio == 16.7

def test_aeropress_override(washed, make_env):
    env = make_env(method=BrewMethod.AEROPRESS, grinder=GrinderModel.FELLOW_GEN2)
    rec = compute_brew_parameters(washed, env)
    assert rec.parameters.ratio == 15.0
    assert rec.parameters.grind_base.clicks == 19
    assert rec.grind_setting == "2.8"
    assert rec.temperature == "91-92°C"
    assert rec.target_time == "1:45-2:15"

def test_pipeline_is_pure(washed, env):
    a = compute_final_parameters(washed, env)
    b = compute_final_parameters(washed, env)
    assert a == b
    assert washed.grind_offset is None

def test_pipeline_tolerates_empty_coffee(env):
    from dripmate_backend.app.models.coffee import Coffee
    rec = compute_brew_parameters(Coffee(), env)
    assert rec.grind_setting == "22 clicks"
    assert rec.temperature == "92-93°C"

def test_custom_temp_and_amount_override(washed, env):
    c = washed.model_copy(update={"custom_temp": "95-96°C", "custom_amount": 20})
    rec = compute_brew_parameters(c, env)
    assert rec.temperature == "95-96°C"
    assert rec.ratio_label == "1:16 (20g)"
    assert rec.water_amount_ml == 320

def test_zero_dose_falls_back_to_default(washed, env):
    rec = compute_brew_parameters(washed.model_copy(update={"custom_amount": 0}), env)
    assert rec.dose_g == 15.0
    assert rec.water_amount_ml == 240

def test_negative_dose_is_rejected(washed, env):
    with pytest.raises(ValueError):
        compute_brew_parameters(washed.model_copy(update={"custom_amount": -5}), env)

def test_notes_follow_trace(ethiopia_natural, make_env, hard_water):
    rec = compute_brew_parameters(ethiopia_natural, make_env(api_water_hardness=hard_water))
    assert rec.notes[0].startswith("Natural process")
    joined = " | ".join(rec.notes)
    assert "High altitude beans" in joined
    assert "Delicate cultivar" in joined
    assert "African origin" in joined
    assert "Hard water" in joined
