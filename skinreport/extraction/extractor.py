from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import lru_cache

from skinreport.config.logger import get_logger
from skinreport.config.settings import settings
from skinreport.extraction.fields import FieldName
from skinreport.extraction.rules import DEFAULT_RULE_TABLE, RuleTable, load_rule_table
from skinreport.extraction.strategies import DEFAULT_STRATEGIES, MatchStrategy

logger = get_logger(__name__)


class FieldExtractor:
    """Best-effort section extractor for free-text skin analysis reports.

    Holds only read-only data (a rule table and an ordered strategy list), so a
    single instance can be shared across threads and event loops.
    """

    def __init__(
        self,
        rules: RuleTable | None = None,
        strategies: Sequence[MatchStrategy] | None = None,
    ) -> None:
        self._rules = rules if rules is not None else DEFAULT_RULE_TABLE
        self._strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    @property
    def rules(self) -> RuleTable:
        return self._rules

    @property
    def fields(self) -> list[str]:
        return self._rules.keys()

    def extract(self, report_text: str, field: FieldName | str) -> str:
        """Return the text of one section, or "" when there is no evidence for it."""
        if not isinstance(report_text, str) or not report_text.strip():
            return ""

        rules = self._rules.get(field)
        if rules is None:
            logger.debug("[extract] unknown field %r", field)
            return ""

        for strategy in self._strategies:
            value = strategy.try_match(report_text, rules, self._rules)
            if value:
                logger.debug(
                    "[extract] field=%s strategy=%s chars=%s",
                    rules.field,
                    strategy.name,
                    len(value),
                )
                return value

        logger.debug("[extract] field=%s no match", rules.field)
        return ""

    def extract_fields(
        self,
        report_text: str,
        fields: Iterable[FieldName | str] | None = None,
    ) -> dict[str, str]:
        """Extract several fields at once; defaults to every field in the rule table."""
        targets = list(fields) if fields is not None else self.fields
        result: dict[str, str] = {}
        for field in targets:
            key = FieldName.coerce(field)
            if key is None:
                continue
            result[key] = self.extract(report_text, key)
        return result


@lru_cache(maxsize=1)
def get_extractor() -> FieldExtractor:
    """Shared extractor built from ``RULES_FILE``, or the default table when it is unset.

    Raises ``RuntimeError`` the first time it is called if ``RULES_FILE`` points
    at a missing or invalid rule table. A failed build is not cached.
    """
    path = settings.rules_path()
    if path is None:
        return FieldExtractor()
    return FieldExtractor(rules=load_rule_table(path))


def extract(report_text: str, field: FieldName | str) -> str:
    """Extract one field with the shared extractor.

    Report content never makes this raise. A broken ``RULES_FILE`` does: the
    ``RuntimeError`` from :func:`get_extractor` propagates to the caller.
    """
    return get_extractor().extract(report_text, field)


def extract_fields(
    report_text: str,
    fields: Iterable[FieldName | str] | None = None,
) -> dict[str, str]:
    """Like :func:`extract` for several fields; raises ``RuntimeError`` on a broken ``RULES_FILE``."""
    return get_extractor().extract_fields(report_text, fields)
