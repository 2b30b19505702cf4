import json
from datetime import date, datetime, timedelta, timezone

import pytest

from dripmate_backend.app.models.coffee import Coffee, CoffeePatch
from dripmate_backend.app.services import coffee_list as cl
from dripmate_backend.app.services.data_stores import (
    coffees_path,
    get_active_water_hardness,
    load_coffee_list,
    load_environment,
    load_settings,
    save_coffee_list,
    save_settings,
)
from dripmate_backend.app.services.water_hardness import manual_hardness, lookup

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _bag(name, **kw):
    return Coffee(name=name, origin=kw.pop("origin", "Kenya"), process=kw.pop("process", "Washed"), **kw)

# ---------------- store ----------------

def test_empty_store_loads_empty_list(isolated_data_dir):
    assert load_coffee_list() == []

def test_store_round_trip_uses_camel_case(washed, isolated_data_dir):
    washed.custom_amount = 18
    washed.grind_offset = -2
    save_coffee_list([washed])
    raw = json.loads(coffees_path().read_text(encoding="utf-8"))
    assert raw[0]["customAmount"] == 18
    assert raw[0]["grindOffset"] == -2
    loaded = load_coffee_list()
    assert loaded[0].grind_offset == -2
    assert loaded[0].name == washed.name

def test_store_keeps_unknown_fields(isolated_data_dir):
    coffees_path().write_text(json.dumps([{"id": "x", "name": "A", "imageUrl": "data:..."}]), encoding="utf-8")
    save_coffee_list(load_coffee_list())
    raw = json.loads(coffees_path().read_text(encoding="utf-8"))
    assert raw[0]["imageUrl"] == "data:..."

def test_store_skips_unreadable_records(isolated_data_dir):
    coffees_path().write_text(json.dumps([{"id": "ok"}, "junk", {"id": "bad", "grindOffset": "lots"}]),
                              encoding="utf-8")
    assert [c.id for c in load_coffee_list()] == ["ok"]

def test_store_coerces_numeric_descriptive_fields(isolated_data_dir):
    coffees_path().write_text(json.dumps([{"id": "a", "altitude": 1800}, {"id": "b", "altitude": "1500"}]),
                              encoding="utf-8")
    loaded = load_coffee_list()
    assert [c.id for c in loaded] == ["a", "b"]
    assert loaded[0].altitude == "1800"

def test_save_keeps_unreadable_rows_on_disk(isolated_data_dir):
    coffees_path().write_text(json.dumps([{"id": "ok"}, {"id": "bad", "grindOffset": "lots"}]), encoding="utf-8")
    coffees = load_coffee_list()
    coffees[0].roaster = "R"
    save_coffee_list(coffees)
    raw = json.loads(coffees_path().read_text(encoding="utf-8"))
    assert [r["id"] for r in raw] == ["ok", "bad"]
    assert raw[1] == {"id": "bad", "grindOffset": "lots"}
    assert raw[0]["roaster"] == "R"

def test_explicit_passthrough_replaces_stored_unreadable_rows(isolated_data_dir):
    coffees_path().write_text(json.dumps([{"id": "bad", "grindOffset": "lots"}]), encoding="utf-8")
    save_coffee_list([], passthrough=[{"id": "remote-bad", "deleted": "maybe"}])
    raw = json.loads(coffees_path().read_text(encoding="utf-8"))
    assert [r["id"] for r in raw] == ["remote-bad"]

def test_store_tolerates_corrupt_file(isolated_data_dir):
    coffees_path().write_text("{not json", encoding="utf-8")
    assert load_coffee_list() == []

def test_settings_mint_device_id_once(isolated_data_dir):
    first = load_settings()
    assert first.device_id.startswith("device-")
    assert load_settings().device_id == first.device_id

def test_settings_migrate_stored_grinder(isolated_data_dir):
    (isolated_data_dir / "settings.json").parent.mkdir(parents=True, exist_ok=True)
    (isolated_data_dir / "settings.json").write_text(json.dumps({"grinder": "timemore"}), encoding="utf-8")
    assert load_settings().grinder.value == "timemore_s3"

def test_settings_never_persist_a_calendar_day(isolated_data_dir):
    (isolated_data_dir / "settings.json").parent.mkdir(parents=True, exist_ok=True)
    (isolated_data_dir / "settings.json").write_text(json.dumps({"today": "2020-01-01", "deviceId": "device-x"}),
                                                     encoding="utf-8")
    s = load_settings()
    assert s.today is None
    save_settings(s)
    raw = json.loads((isolated_data_dir / "settings.json").read_text(encoding="utf-8"))
    assert "today" not in raw
    assert raw["deviceId"] == "device-x"
    assert load_environment().today is None
    assert load_environment(date(2026, 1, 20)).today == date(2026, 1, 20)

def test_active_water_hardness_from_settings(isolated_data_dir):
    s = load_settings()
    assert get_active_water_hardness() is None
    s.api_water_hardness = lookup("10115")
    save_settings(s)
    assert get_active_water_hardness().region == "Berlin"
    s.manual_water_hardness = manual_hardness(30)
    save_settings(s)
    assert get_active_water_hardness().is_manual is True

# ---------------- lifecycle ----------------

def test_add_coffee_fills_defaults_and_goes_first():
    coffees = [_bag("Old", id="old")]
    c = cl.add_coffee(coffees, _bag("New"), now=T0)
    assert coffees[0] is c
    assert c.id.startswith("coffee-")
    assert c.added_date == "2026-01-01T00:00:00.000Z"
    assert (c.cultivar, c.altitude, c.roaster, c.tasting_notes) == ("Unknown", "1500", "Unknown", "No notes")
    assert c.feedback == {} and c.feedback_history == []

def test_add_coffee_requires_core_fields():
    with pytest.raises(ValueError):
        cl.add_coffee([], Coffee(name="No origin", process="Washed"))

def test_add_coffee_rejects_duplicate_id():
    coffees = [_bag("A", id="a")]
    with pytest.raises(ValueError):
        cl.add_coffee(coffees, _bag("B", id="a"))

def test_add_coffee_rejects_non_positive_dose():
    with pytest.raises(ValueError):
        cl.add_coffee([], _bag("A", custom_amount=-5))

def test_find_unknown_raises_key_error():
    with pytest.raises(KeyError):
        cl.find_coffee([], "nope")

def test_update_only_touches_sent_fields():
    coffees = [_bag("A", id="a", roaster="R")]
    cl.update_coffee(coffees, "a", CoffeePatch(custom_amount=18, roast_date="2026-01-01"))
    assert coffees[0].custom_amount == 18
    assert coffees[0].roaster == "R"

def test_soft_delete_restore_and_purge():
    coffees = [_bag("A", id="a"), _bag("B", id="b")]
    cl.soft_delete(coffees, "a", now=T0)
    assert [c.id for c in cl.active_coffees(coffees)] == ["b"]
    assert [c.id for c in cl.recovery_bin(coffees)] == ["a"]
    assert coffees[0].deleted_at == "2026-01-01T00:00:00.000Z"
    cl.restore(coffees, "a")
    assert coffees[0].deleted is False and coffees[0].deleted_at is None
    cl.permanent_delete(coffees, "a")
    assert [c.id for c in coffees] == ["b"]

def test_favorites_sort_first_newest_favorite_first():
    coffees = [
        _bag("Old", id="old", added_date="2025-01-01T00:00:00.000Z"),
        _bag("New", id="new", added_date="2025-06-01T00:00:00.000Z"),
        _bag("Mid", id="mid", added_date="2025-03-01T00:00:00.000Z"),
        _bag("Fav1", id="fav1", added_date="2025-02-01T00:00:00.000Z"),
    ]
    cl.toggle_favorite(coffees, "old", now=T0)
    cl.toggle_favorite(coffees, "fav1", now=T0 + timedelta(days=1))
    assert [c.id for c in cl.active_coffees(coffees)] == ["fav1", "old", "new", "mid"]
    cl.toggle_favorite(coffees, "fav1")
    assert coffees[3].favorited_at is None
    assert [c.id for c in cl.active_coffees(coffees)] == ["old", "new", "mid", "fav1"]

def test_rule_catalogs_are_read_only():
    from dripmate_backend.app.config.paths import RULES_DIR
    from dripmate_backend.app.services.data_stores.io_utils import write_json
    with pytest.raises(PermissionError):
        write_json(RULES_DIR / "grinders.yaml", {})
