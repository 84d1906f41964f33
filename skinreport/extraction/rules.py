"""Static rule tables driving the field extractor.

A rule table is plain data: for every field it lists the heading labels a
report author may use for that section and the trigger keywords used when no
heading is found. New fields are added by adding an entry, never by touching
the matching code.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator, model_validator

from skinreport.config.logger import get_logger
from skinreport.extraction.fields import FieldName

logger = get_logger(__name__)


def _clean_terms(values: Any) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    terms: list[str] = []
    for value in values:
        term = " ".join(str(value).split())
        if term and term not in terms:
            terms.append(term)
    return tuple(terms)


class PatternRule(BaseModel):
    """Heading labels tried, in order, by the structural strategies."""

    model_config = ConfigDict(frozen=True)

    labels: tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("labels", mode="before")
    @classmethod
    def _normalize_labels(cls, value: Any) -> tuple[str, ...]:
        return _clean_terms(value)


class KeywordRule(BaseModel):
    """Trigger words for the sentence harvest fallback."""

    model_config = ConfigDict(frozen=True)

    keywords: tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("keywords", mode="before")
    @classmethod
    def _normalize_keywords(cls, value: Any) -> tuple[str, ...]:
        return _clean_terms(value)


class FieldRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    pattern: PatternRule = Field(default_factory=PatternRule)
    keyword: KeywordRule = Field(default_factory=KeywordRule)

    @model_validator(mode="before")
    @classmethod
    def _accept_flat_layout(cls, data: Any) -> Any:
        # Rule files use {"field", "labels", "keywords"}.
        if isinstance(data, dict):
            data = dict(data)
            if "labels" in data and "pattern" not in data:
                data["pattern"] = {"labels": data.pop("labels")}
            if "keywords" in data and "keyword" not in data:
                data["keyword"] = {"keywords": data.pop("keywords")}
        return data

    @field_validator("field", mode="before")
    @classmethod
    def _normalize_field(cls, value: Any) -> str:
        key = FieldName.coerce(value)
        if key is None:
            raise ValueError("field must be a non-empty string")
        return key

    @property
    def labels(self) -> tuple[str, ...]:
        return self.pattern.labels

    @property
    def keywords(self) -> tuple[str, ...]:
        return self.keyword.keywords


class RuleTable(BaseModel):
    """Ordered, read-only mapping of field key to its rules."""

    model_config = ConfigDict(frozen=True)

    fields: tuple[FieldRules, ...] = Field(default_factory=tuple)

    _index: dict[str, FieldRules] = PrivateAttr(default_factory=dict)
    _labels: tuple[str, ...] = PrivateAttr(default_factory=tuple)

    @model_validator(mode="after")
    def _unique_fields(self) -> "RuleTable":
        seen: set[str] = set()
        for rules in self.fields:
            if rules.field in seen:
                raise ValueError(f"duplicate field in rule table: {rules.field}")
            seen.add(rules.field)
        return self

    def model_post_init(self, __context: Any) -> None:
        self._index = {rules.field: rules for rules in self.fields}
        labels: list[str] = []
        for rules in self.fields:
            for label in rules.labels:
                if label not in labels:
                    labels.append(label)
        self._labels = tuple(labels)

    def get(self, field: object) -> FieldRules | None:
        key = FieldName.coerce(field)
        if key is None:
            return None
        return self._index.get(key)

    def keys(self) -> list[str]:
        return [rules.field for rules in self.fields]

    def heading_labels(self) -> tuple[str, ...]:
        """Every label registered for any field, used to find where a section ends."""
        return self._labels

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, field: object) -> bool:
        return self.get(field) is not None


DEFAULT_RULES: list[dict[str, Any]] = [
    {
        "field": FieldName.CONDITION,
        "labels": ["Skin Condition", "Condition"],
        "keywords": ["condition", "appears to be", "diagnosis", "visible"],
    },
    {
        "field": FieldName.SEVERITY,
        "labels": ["Severity"],
        "keywords": ["mild", "moderate", "severe", "severity"],
    },
    {
        "field": FieldName.TREATMENTS,
        "labels": ["Ayurvedic Treatments", "Traditional Ayurvedic Treatments", "Treatments"],
        "keywords": ["neem", "turmeric", "manjistha", "treatment", "herbs"],
    },
    {
        "field": FieldName.RECOMMENDED_FOODS,
        "labels": ["Recommended Foods", "Dietary Recommendations"],
        "keywords": ["eat", "consume", "foods", "diet", "recommended"],
    },
    {
        "field": FieldName.FOODS_TO_AVOID,
        "labels": ["Foods to Avoid"],
        "keywords": ["avoid", "eliminate", "reduce", "limit"],
    },
    {
        "field": FieldName.LIFESTYLE_RECOMMENDATIONS,
        "labels": ["Lifestyle Recommendations", "Lifestyle Modifications", "Lifestyle"],
        "keywords": ["lifestyle", "routine", "sleep", "exercise", "stress"],
    },
]

DEFAULT_RULE_TABLE = RuleTable.model_validate({"fields": DEFAULT_RULES})


def load_rule_table(path: str | Path) -> RuleTable:
    """Load a deployment rule table from JSON.

    Expected shape: ``{"fields": [{"field": ..., "labels": [...], "keywords": [...]}]}``.
    File order is table order.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(f"Failed to load rule table file: {path}") from exc

    try:
        payload = json.loads(raw)
        table = RuleTable.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise RuntimeError(f"Invalid rule table file: {path}") from exc

    logger.info("[rules] loaded %s field(s) from %s", len(table), path)
    return table
