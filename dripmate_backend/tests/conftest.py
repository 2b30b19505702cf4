from __future__ import annotations
import os
from datetime import date

import pytest
from fastapi.testclient import TestClient

from dripmate_backend.app.main import app
from dripmate_backend.app.models.coffee import Coffee
from dripmate_backend.app.models.environment import Environment, WaterHardness
from dripmate_backend.app.schemas import BrewMethod, GrinderModel

# --- Data tree override ------------------------------------------------------
@pytest.fixture(scope="session", autouse=True)
def tmp_data_tree(tmp_path_factory):
    tmp = tmp_path_factory.mktemp("data_tree")
    os.environ["DATA_DIR"] = str(tmp)
    return tmp

@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Each test gets its own coffees.json / settings.json."""
    d = tmp_path / "data"
    monkeypatch.setenv("DATA_DIR", str(d))
    return d

# --- Clients -----------------------------------------------------------------
@pytest.fixture
def client():
    return TestClient(app)

# --- Engine inputs -----------------------------------------------------------
@pytest.fixture
def env():
    """Comandante on a V60, no water data, fixed calendar day."""
    return Environment(grinder=GrinderModel.COMANDANTE_MK3, method=BrewMethod.V60, today=date(2026, 1, 20))

@pytest.fixture
def make_env(env):
    def _make(**changes):
        return env.model_copy(update=changes)
    return _make

@pytest.fixture
def soft_water():
    return WaterHardness(value=10)

@pytest.fixture
def hard_water():
    return WaterHardness(value=25)

@pytest.fixture
def washed():
    return Coffee(id="c-washed", name="La Esperanza", origin="Colombia", process="Washed",
                  cultivar="Caturra", altitude="1500", roaster="Local")

@pytest.fixture
def ethiopia_natural():
    return Coffee(id="c-eth", name="Guji Gesha", origin="Ethiopia", process="Natural",
                  cultivar="Gesha", altitude="1900 masl", roaster="Local")

# --- Time --------------------------------------------------------------------
class FakeClock:
    def __init__(self, t: float = 100.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds

@pytest.fixture
def clock():
    return FakeClock()
