# dripmate_backend/app/services/router_helpers/coffee_helpers.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Tuple

from fastapi import HTTPException, status

from dripmate_backend.app.brew_engine.freshness import freshness_badge
from dripmate_backend.app.models.coffee import Coffee
from dripmate_backend.app.models.environment import Environment
from dripmate_backend.app.services.coffee_list import find_coffee
from dripmate_backend.app.services.data_stores import load_coffee_list, load_environment


def load_with_coffee(coffee_id: str) -> Tuple[List[Coffee], Coffee, Environment]:
    """Whole list (for saving back), the addressed coffee, and the current environment."""
    coffees = load_coffee_list()
    try:
        coffee = find_coffee(coffees, coffee_id)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"coffee not found: {coffee_id}")
    return coffees, coffee, load_environment()

def coffee_card(coffee: Coffee, environment: Environment) -> Dict[str, Any]:
    out = coffee.to_wire()
    out["freshness"] = freshness_badge(coffee.roast_date, environment.today)
    return out

def unprocessable(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

@contextmanager
def engine_errors() -> Iterator[None]:
    """Engine ValueErrors (e.g. a negative stored dose) surface as 422."""
    try:
        yield
    except ValueError as e:
        raise unprocessable(e)
