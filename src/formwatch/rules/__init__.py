"""Rule expressions — declarative per-field rules, localized messages.

Usage::

    from formwatch.rules import RuleEvaluator

    result = RuleEvaluator().evaluate(
        {"name": "", "age": "x"},
        {
            "name": "required|between:3,32",
            "age": "numeric|max:99",
            "birthday": "date|required_without:age",
        },
        locale="en",
    )
    if not result:
        # result.errors == {"name": ("The name field is required.",),
        #                   "age": ("The age must be a number.",)}
        ...

The validation engine only depends on the ``RuleEngine`` protocol; pass
any other implementation through ``ValidationConfig.rule_engine``.
"""

from formwatch.rules.builtin import MISSING, RULES, RuleContext, RuleDef
from formwatch.rules.evaluator import RuleEngine, RuleEvaluator, attribute_name
from formwatch.rules.grammar import ParsedRule, parse_rule, parse_rules
from formwatch.rules.messages import CATALOGS, DEFAULT_LOCALE, catalog_for

__all__ = [
    "CATALOGS",
    "DEFAULT_LOCALE",
    "MISSING",
    "RULES",
    "ParsedRule",
    "RuleContext",
    "RuleDef",
    "RuleEngine",
    "RuleEvaluator",
    "attribute_name",
    "catalog_for",
    "parse_rule",
    "parse_rules",
]
