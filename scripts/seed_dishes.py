"""
Seed the demo dish library for a user.

Usage
-----

    # default trio: Pancakes, Spaghetti Bolognese, Caesar Salad
    python -m scripts.seed_dishes <USER_ID>

    # custom list (Dish wire shape, camelCase keys) in a JSON file
    python -m scripts.seed_dishes <USER_ID> --file path/to/dishes.json
"""
from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, List

from core.catalog import DishCatalog
from core.errors import ConflictError
from core.models.dish import Dish
from services.db import SqlPlannerStore, init_models, session_scope

# ────────────────────────────────────────────────────────────────────
_DEFAULT_DISHES: List[dict[str, Any]] = [
    {
        "id": "1",
        "name": "Pancakes",
        "servings": 1,
        "seasonings": ["Salt", "Sugar", "Vanilla Extract"],
        "ingredients": [
            {"id": "i1", "name": "Flour", "amount": "2", "unit": "cups"},
            {"id": "i2", "name": "Milk", "amount": "1.5", "unit": "cups"},
            {"id": "i3", "name": "Eggs", "amount": "2", "unit": "pcs"},
        ],
    },
    {
        "id": "2",
        "name": "Spaghetti Bolognese",
        "servings": 1,
        "seasonings": ["Salt", "Pepper", "Oregano", "Basil"],
        "ingredients": [
            {"id": "i4", "name": "Spaghetti", "amount": "500", "unit": "g"},
            {"id": "i5", "name": "Ground Beef", "amount": "300", "unit": "g"},
            {"id": "i6", "name": "Tomato Sauce", "amount": "1", "unit": "can"},
        ],
    },
    {
        "id": "3",
        "name": "Caesar Salad",
        "servings": 1,
        "seasonings": ["Salt", "Pepper"],
        "ingredients": [
            {"id": "i7", "name": "Romaine Lettuce", "amount": "1", "unit": "head"},
            {"id": "i8", "name": "Croutons", "amount": "1", "unit": "cup"},
            {"id": "i9", "name": "Parmesan", "amount": "0.5", "unit": "cup"},
        ],
    },
]


async def _seed(user_id: str, dishes: list[dict[str, Any]]) -> None:
    await init_models()
    added = 0
    async with session_scope() as db:
        catalog = DishCatalog(SqlPlannerStore(db, user_id))
        for raw in dishes:
            try:
                await catalog.add_dish(Dish.model_validate(raw))
            except ConflictError as exc:
                print(f"· skipped: {exc}")
                continue
            added += 1
    print(f"✓ inserted {added} dishes for user {user_id}")


def _load_json(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("JSON file must contain a list of dish dictionaries")
    return data


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("user_id", help="target user id")
    parser.add_argument(
        "--file",
        type=Path,
        help="optional JSON file with dishes to seed (overrides defaults)",
    )
    args = parser.parse_args()

    dishes = _load_json(args.file) if args.file else _DEFAULT_DISHES
    asyncio.run(_seed(args.user_id, dishes))


if __name__ == "__main__":
    main()
