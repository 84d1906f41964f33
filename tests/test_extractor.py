"""Tests for the layered section extractor."""

import sys
import time
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from skinreport.extraction import (
    FieldExtractor,
    FieldName,
    RuleTable,
    cleanup,
    extract,
    extract_fields,
    split_sentences,
)
from skinreport.extraction.strategies import (
    ColonHeadingStrategy,
    InlineLabelStrategy,
    KeywordHarvestStrategy,
    MatchStrategy,
    NumberedHeadingStrategy,
    StrongHeadingStrategy,
)


NUMBERED_REPORT = """**IMPORTANT**: This analysis is educational only.

**1. Skin Condition Identification**
- Red, scaly patches on the forearm with mild flaking.
- Pattern is consistent with eczema.

**2. Severity Assessment**
- Moderate
- Patches are widespread but not broken.

**3. Ayurvedic Perspective**
- Pitta and Vata imbalance.

**4. Traditional Ayurvedic Treatments**
- Apply neem oil twice daily.
- Take turmeric with warm milk.

**5. Dietary Recommendations**
- Eat cooling foods such as cucumber and coconut.

**6. Foods to Avoid**
- Spicy, fried and fermented foods.

**7. Lifestyle Modifications**
- Sleep before 10 pm.
- Practice daily pranayama to reduce stress.
"""

PLAIN_REPORT = (
    "The rash appears to be contact dermatitis. "
    "It looks mild at this stage.\n"
    "Avoid spicy foods and fried items. "
    "Drink plenty of water and eat fresh fruit. "
    "A regular sleep routine will help."
)


@pytest.fixture
def extractor() -> FieldExtractor:
    return FieldExtractor()


def test_numbered_report_all_fields(extractor: FieldExtractor) -> None:
    fields = extractor.extract_fields(NUMBERED_REPORT)

    assert list(fields) == [field.value for field in FieldName]
    assert fields["condition"] == (
        "Red, scaly patches on the forearm with mild flaking. - Pattern is consistent with eczema."
    )
    assert fields["severity"].startswith("Moderate")
    assert "neem oil" in fields["treatments"]
    assert "turmeric" in fields["treatments"]
    assert "Pitta" not in fields["treatments"]
    assert fields["recommended_foods"] == "Eat cooling foods such as cucumber and coconut."
    assert fields["foods_to_avoid"] == "Spicy, fried and fermented foods."
    assert fields["lifestyle_recommendations"] == (
        "Sleep before 10 pm. - Practice daily pranayama to reduce stress."
    )


def test_strong_heading_without_number(extractor: FieldExtractor) -> None:
    text = "**Severity**\nMild redness only.\n\n**Foods to Avoid**\nDairy."
    assert extractor.extract(text, FieldName.SEVERITY) == "Mild redness only."
    assert extractor.extract(text, FieldName.FOODS_TO_AVOID) == "Dairy."


def test_strong_heading_wins_over_keywords(extractor: FieldExtractor) -> None:
    text = (
        "You should avoid scratching the area.\n\n"
        "**Foods to Avoid**\n- Citrus fruits and tomatoes.\n"
    )
    assert extractor.extract(text, FieldName.FOODS_TO_AVOID) == "Citrus fruits and tomatoes."


def test_strong_heading_with_trailing_colon(extractor: FieldExtractor) -> None:
    text = "**Severity:** Moderate\n**Condition**: Psoriasis"
    assert extractor.extract(text, FieldName.SEVERITY) == "Moderate"
    assert extractor.extract(text, FieldName.CONDITION) == "Psoriasis"


def test_markdown_heading_ends_section(extractor: FieldExtractor) -> None:
    text = "**Severity**\nSevere itching.\n### Notes\nSee a dermatologist."
    assert extractor.extract(text, FieldName.SEVERITY) == "Severe itching."


def test_colon_heading(extractor: FieldExtractor) -> None:
    text = (
        "Skin Condition: Acne vulgaris on the cheeks.\n"
        "Severity: Mild\n"
        "Foods to Avoid: Sugar, dairy\n"
        "and deep fried snacks.\n"
        "\n"
        "Lifestyle Recommendations: Wash the face twice a day."
    )
    assert extractor.extract(text, FieldName.CONDITION) == "Acne vulgaris on the cheeks."
    assert extractor.extract(text, FieldName.SEVERITY) == "Mild"
    assert extractor.extract(text, FieldName.FOODS_TO_AVOID) == "Sugar, dairy and deep fried snacks."
    assert extractor.extract(text, FieldName.LIFESTYLE_RECOMMENDATIONS) == "Wash the face twice a day."


def test_colon_heading_with_list_prefix(extractor: FieldExtractor) -> None:
    text = "3. Severity: Moderate\n- Recommended Foods: Ghee and leafy greens."
    assert extractor.extract(text, FieldName.SEVERITY) == "Moderate"
    assert extractor.extract(text, FieldName.RECOMMENDED_FOODS) == "Ghee and leafy greens."


def test_colon_heading_keeps_lowercase_paragraph(extractor: FieldExtractor) -> None:
    text = "Foods to Avoid: Sugar and dairy.\n\nalso cut back on: fried snacks."
    assert extractor.extract(text, FieldName.FOODS_TO_AVOID) == "Sugar and dairy. also cut back on: fried snacks."


def test_colon_heading_stops_at_title_paragraph(extractor: FieldExtractor) -> None:
    text = "Foods to Avoid: Sugar and dairy.\n\nFollow up: in two weeks."
    assert extractor.extract(text, FieldName.FOODS_TO_AVOID) == "Sugar and dairy."


def test_cleanup_example() -> None:
    assert cleanup("- Use neem oil.\n\nApply twice daily.\n") == "Use neem oil. Apply twice daily."


def test_cleanup_through_extraction(extractor: FieldExtractor) -> None:
    text = "**Ayurvedic Treatments**\n- Use neem oil.\n\nApply twice daily.\n"
    assert extractor.extract(text, FieldName.TREATMENTS) == "Use neem oil. Apply twice daily."


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", ""),
        ("   \n\t", ""),
        ("• Bullet point", "Bullet point"),
        ("— em dash lead", "em dash lead"),
        ("  * star bullet\n  next line  ", "star bullet next line"),
        ("line one\r\n\r\nline two", "line one line two"),
    ],
)
def test_cleanup_variants(raw: str, expected: str) -> None:
    assert cleanup(raw) == expected


def test_keyword_fallback(extractor: FieldExtractor) -> None:
    result = extractor.extract(PLAIN_REPORT, FieldName.FOODS_TO_AVOID)
    assert "Avoid spicy foods and fried items." in result


def test_keyword_fallback_follows_keyword_order(extractor: FieldExtractor) -> None:
    result = extractor.extract(PLAIN_REPORT, FieldName.CONDITION)
    # "appears to be" is declared after "condition"; "condition" matches nothing here.
    assert result == "The rash appears to be contact dermatitis."

    text = "Sleep early. Keep a steady routine."
    result = extractor.extract(text, FieldName.LIFESTYLE_RECOMMENDATIONS)
    # "routine" is declared before "sleep", so its sentence comes first.
    assert result == "Keep a steady routine. Sleep early."


def test_keyword_fallback_repeats_sentence_per_keyword(extractor: FieldExtractor) -> None:
    text = "Avoid sugar and limit dairy."
    result = extractor.extract(text, FieldName.FOODS_TO_AVOID)
    assert result == "Avoid sugar and limit dairy. Avoid sugar and limit dairy."


def test_keyword_fallback_single_pass_deduplicates() -> None:
    rules = RuleTable.model_validate(
        {"fields": [{"field": "notes", "labels": ["Notes"], "keywords": ["neem"]}]}
    )
    text = "Use neem. Use neem. Rest."
    assert FieldExtractor(rules=rules).extract(text, "notes") == "Use neem."


def test_keyword_matching_is_case_insensitive(extractor: FieldExtractor) -> None:
    assert extractor.extract("SEVERE SWELLING NOTED.", FieldName.SEVERITY) == "SEVERE SWELLING NOTED."


def test_whitespace_only_section_falls_through(extractor: FieldExtractor) -> None:
    text = "**Severity**\n   \n**Next Section**\nThe lesion is mild and localised."
    result = extractor.extract(text, FieldName.SEVERITY)
    # Both heading strategies capture only whitespace, so the keyword harvest answers.
    assert result.strip()
    assert result.endswith("The lesion is mild and localised.")


def test_no_evidence_returns_empty(extractor: FieldExtractor) -> None:
    assert extractor.extract("Nothing relevant here.", FieldName.TREATMENTS) == ""


def test_unknown_field_returns_empty(extractor: FieldExtractor) -> None:
    assert extractor.extract(NUMBERED_REPORT, "Blood Pressure") == ""
    assert extractor.extract(NUMBERED_REPORT, "") == ""
    assert extractor.extract(NUMBERED_REPORT, None) == ""  # type: ignore[arg-type]


def test_field_accepts_member_name_and_label_text(extractor: FieldExtractor) -> None:
    by_enum = extractor.extract(NUMBERED_REPORT, FieldName.FOODS_TO_AVOID)
    assert extractor.extract(NUMBERED_REPORT, "FOODS_TO_AVOID") == by_enum
    assert extractor.extract(NUMBERED_REPORT, "foods_to_avoid") == by_enum
    assert extractor.extract(NUMBERED_REPORT, "Foods to Avoid") == by_enum


@pytest.mark.parametrize(
    "text",
    [
        "",
        "**",
        "****",
        "** unmatched emphasis",
        "Severity:",
        "\x00\x01\x02\xff� binary-ish",
        "." * 500,
        "**1.**\n**2. **\n:::\n",
        "(((([[[[{{{{",
    ],
)
def test_never_raises(extractor: FieldExtractor, text: str) -> None:
    for field in FieldName:
        assert isinstance(extractor.extract(text, field), str)


def test_non_string_input_returns_empty(extractor: FieldExtractor) -> None:
    assert extractor.extract(None, FieldName.SEVERITY) == ""  # type: ignore[arg-type]
    assert extractor.extract(b"**Severity**\nMild", FieldName.SEVERITY) == ""  # type: ignore[arg-type]


def test_idempotent(extractor: FieldExtractor) -> None:
    first = extractor.extract_fields(NUMBERED_REPORT)
    second = extractor.extract_fields(NUMBERED_REPORT)
    assert first == second
    assert extractor.extract(PLAIN_REPORT, "severity") == extractor.extract(PLAIN_REPORT, "severity")


def test_extract_fields_subset_and_unknown(extractor: FieldExtractor) -> None:
    fields = extractor.extract_fields(NUMBERED_REPORT, [FieldName.SEVERITY, "unknown_field"])
    assert list(fields) == ["severity", "unknown_field"]
    assert fields["severity"]
    assert fields["unknown_field"] == ""


def test_module_level_helpers_use_default_table() -> None:
    assert extract(NUMBERED_REPORT, FieldName.FOODS_TO_AVOID) == "Spicy, fried and fermented foods."
    assert set(extract_fields(PLAIN_REPORT)) == {field.value for field in FieldName}


def test_custom_field_without_code_change() -> None:
    rules = RuleTable.model_validate(
        {
            "fields": [
                {"field": "herbal_oils", "labels": ["Herbal Oils"], "keywords": ["oil"]},
                {"field": "severity", "labels": ["Severity"], "keywords": ["mild"]},
            ]
        }
    )
    custom = FieldExtractor(rules=rules)
    text = "**Herbal Oils**\n- Coconut and neem.\n**Severity**\nMild"
    assert custom.fields == ["herbal_oils", "severity"]
    assert custom.extract(text, "herbal_oils") == "Coconut and neem."
    assert custom.extract(text, FieldName.TREATMENTS) == ""


def test_split_sentences() -> None:
    assert split_sentences("One. Two!\nThree? trailing") == ["One.", "Two!", "Three?", "trailing"]
    assert split_sentences("") == []


def test_strategies_individually() -> None:
    table = FieldExtractor().rules
    severity = table.get(FieldName.SEVERITY)

    assert StrongHeadingStrategy().try_match("**Severity**\nMild", severity, table) == "Mild"
    assert StrongHeadingStrategy().try_match("**2. Severity**\nMild", severity, table) is None
    assert NumberedHeadingStrategy().try_match("**2. Severity**\nMild", severity, table) == "Mild"
    assert NumberedHeadingStrategy().try_match("**2) Severity Level**\nMild", severity, table) == "Mild"
    assert ColonHeadingStrategy().try_match("Severity: Mild", severity, table) == "Mild"
    assert ColonHeadingStrategy().try_match("The severity: mild", severity, table) is None
    assert InlineLabelStrategy().try_match("**Severity**: Mild", severity, table) == "Mild"
    assert KeywordHarvestStrategy().try_match("Nothing here.", severity, table) is None


@pytest.mark.parametrize(
    "text, field, expected_start, expected_end",
    [
        ("**Severity**\nMild" + " " * 100_000 + "\nredness", FieldName.SEVERITY, "Mild redness", "Mild redness"),
        ("**Severity**\nMild" + " " * 100_000 + "redness", FieldName.SEVERITY, "Mild ", " redness"),
        ("Avoid" + " " * 100_000 + "sugar.", FieldName.FOODS_TO_AVOID, "Avoid ", " sugar."),
    ],
)
def test_long_whitespace_runs_stay_fast(
    extractor: FieldExtractor, text: str, field: FieldName, expected_start: str, expected_end: str
) -> None:
    started = time.perf_counter()
    result = extractor.extract(text, field)
    elapsed = time.perf_counter() - started
    assert result.startswith(expected_start)
    assert result.endswith(expected_end)
    assert elapsed < 2.0


class _FixedStrategy(MatchStrategy):
    def __init__(self, name: str, value: str | None) -> None:
        self.name = name
        self.value = value

    def try_match(self, text, rules, table):
        return self.value


def test_custom_strategies_run_in_order() -> None:
    custom = FieldExtractor(
        strategies=[
            _FixedStrategy("nothing", None),
            _FixedStrategy("blank", ""),
            _FixedStrategy("first", "first"),
            _FixedStrategy("second", "second"),
        ]
    )
    assert custom.extract("Any report text.", FieldName.SEVERITY) == "first"
    assert FieldExtractor(strategies=[]).extract("**Severity**\nMild", FieldName.SEVERITY) == ""
