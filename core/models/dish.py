"""
core/models/dish.py
────────────────────────────────────────────────────────────────────────
Dish catalogue entities.

`Ingredient.amount` is loosely typed on the wire (number or numeric
string, sometimes free text such as "a pinch").  It is parsed exactly once,
when the model is built, into a `Quantity`; aggregation only ever reads
`ingredient.quantity`.  The raw value is kept so backups round-trip.
"""
from __future__ import annotations

import math
import re
import uuid
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid.uuid4())


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ───────── amount parsing ────────────────────────────────────────────
class Quantity(NamedTuple):
    value: float
    parsed: bool


# leading decimal number, same prefix rule as a lenient float parser:
# "1.5 cups" -> 1.5, "2" -> 2, "a pinch" -> unparsed
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

UNPARSED = Quantity(0.0, False)


def parse_amount(raw: object) -> Quantity:
    if raw is None or isinstance(raw, bool):
        return UNPARSED
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        match = _LEADING_NUMBER.match(str(raw))
        if not match:
            return UNPARSED
        value = float(match.group(0))
    if math.isnan(value) or math.isinf(value):
        return UNPARSED
    return Quantity(value, True)


# ───────── entities ──────────────────────────────────────────────────
class Ingredient(WireModel):
    id: str = Field(default_factory=new_id)
    name: str
    amount: int | float | str | None = None
    unit: str = ""

    _quantity: Quantity = PrivateAttr(default=UNPARSED)

    def model_post_init(self, __context: object) -> None:
        self._quantity = parse_amount(self.amount)

    @property
    def quantity(self) -> Quantity:
        return self._quantity

    @property
    def merge_key(self) -> str:
        return f"{self.name.lower()}-{self.unit.lower()}"


class Dish(WireModel):
    id: str = Field(default_factory=new_id)
    name: str
    ingredients: list[Ingredient] = Field(default_factory=list)
    seasonings: list[str] = Field(default_factory=list)
    video_link: str | None = None
    # how many servings the recipe yields as written; not a multiplier
    servings: int | None = Field(default=1, ge=1)
