"""Structured-field extraction exports."""

from skinreport.extraction.extractor import FieldExtractor, extract, extract_fields, get_extractor
from skinreport.extraction.fields import FieldName
from skinreport.extraction.rules import (
    DEFAULT_RULE_TABLE,
    FieldRules,
    KeywordRule,
    PatternRule,
    RuleTable,
    load_rule_table,
)
from skinreport.extraction.strategies import MatchStrategy, cleanup, split_sentences

__all__ = [
    "DEFAULT_RULE_TABLE",
    "FieldExtractor",
    "FieldName",
    "FieldRules",
    "KeywordRule",
    "MatchStrategy",
    "PatternRule",
    "RuleTable",
    "cleanup",
    "extract",
    "extract_fields",
    "get_extractor",
    "load_rule_table",
    "split_sentences",
]
