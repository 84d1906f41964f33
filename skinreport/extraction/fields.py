from __future__ import annotations

import re
from enum import Enum


class FieldName(str, Enum):
    """Semantic sections pulled out of a skin analysis report, in display order."""

    CONDITION = "condition"
    SEVERITY = "severity"
    TREATMENTS = "treatments"
    RECOMMENDED_FOODS = "recommended_foods"
    FOODS_TO_AVOID = "foods_to_avoid"
    LIFESTYLE_RECOMMENDATIONS = "lifestyle_recommendations"

    @classmethod
    def coerce(cls, value: object) -> str | None:
        """Normalize a FieldName, its value, or its member name to a field key.

        Returns None for anything that is not a string-like key. Keys outside the
        enumeration come back snake_cased so rule tables can register extra fields.
        """
        if isinstance(value, cls):
            return value.value
        if not isinstance(value, str):
            return None
        key = value.strip()
        if not key:
            return None
        normalized = re.sub(r"[\s-]+", "_", key).lower()
        member = cls.__members__.get(normalized.upper())
        if member is not None:
            return member.value
        return normalized
