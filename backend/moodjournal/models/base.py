"""
Shared schema plumbing
======================
The public JSON contract is camelCase (``aiAnalysisEnabled``,
``dominantMood``) while Python code and the database use snake_case.
Every API model inherits the alias config from here.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialises to camelCase, accepts either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero on the positive side (2.5 -> 3, -2.5 -> -2).

    ``round()`` uses banker's rounding, which would report a 3.25
    happiness score as 3.2 and a 62.5% share as 62%.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp_score(value: object, low: int, high: int, default: int) -> int:
    """Coerce a model-supplied number into ``[low, high]``.

    ``None`` means the field was omitted and gets ``default``. Anything
    that is not numeric raises ``ValueError`` so the payload is rejected.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError("boolean is not a score")
    number = float(value)  # type: ignore[arg-type]
    if math.isnan(number) or math.isinf(number):
        raise ValueError("score must be finite")
    return int(max(low, min(high, round_half_up(number))))
