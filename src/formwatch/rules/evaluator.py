"""Rule evaluator — turns values plus rule expressions into a result.

``RuleEngine`` is the narrow interface the validation engine talks to;
``RuleEvaluator`` is the default implementation backed by the built-in
rules. The locale is an explicit argument of every call: there is no
process-wide "current language".
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from formwatch.errors import ConfigurationError
from formwatch.result import EvaluationResult
from formwatch.rules.builtin import RULES, RuleContext, is_validatable, size_kind
from formwatch.rules.grammar import ParsedRule, parse_rules
from formwatch.rules.messages import DEFAULT_LOCALE, catalog_for, format_message, template_for


@runtime_checkable
class RuleEngine(Protocol):
    """Evaluates a rule set against a plain field → value mapping."""

    def evaluate(
        self,
        values: Mapping[str, Any],
        rules: Mapping[str, Any],
        custom_messages: Mapping[str, str] | None = None,
        *,
        locale: str = DEFAULT_LOCALE,
        attribute_names: Mapping[str, str] | None = None,
    ) -> EvaluationResult: ...


class RuleEvaluator:
    """Default ``RuleEngine``.

    For each field the rules run in declared order and the first
    failing rule stops that field, so every invalid field carries
    exactly one message. Rules other than the implicit ``required*``
    family are skipped while the field is empty.

    Message lookup order: ``custom_messages["<rule>.<field>"]``, then
    ``custom_messages["<rule>"]``, then the locale's catalog.

    Example::

        evaluator = RuleEvaluator()
        result = evaluator.evaluate(
            {"age": "x"},
            {"age": "numeric|max:99"},
            locale="en",
        )
        result.errors.first("age")  # "The age must be a number."
    """

    __slots__ = ()

    def evaluate(
        self,
        values: Mapping[str, Any],
        rules: Mapping[str, Any],
        custom_messages: Mapping[str, str] | None = None,
        *,
        locale: str = DEFAULT_LOCALE,
        attribute_names: Mapping[str, str] | None = None,
    ) -> EvaluationResult:
        if not isinstance(rules, Mapping):
            raise ConfigurationError(f"rules must be a mapping, got {type(rules).__name__}")

        catalog = catalog_for(locale)
        messages = custom_messages or {}
        names = attribute_names or {}
        errors: dict[str, list[str]] = {}

        for field_name, expression in rules.items():
            parsed = parse_rules(expression, field=field_name)
            ctx = RuleContext(
                values=values,
                field=field_name,
                rule_names=frozenset(rule.name for rule in parsed),
            )
            value = ctx.lookup(field_name)

            for rule in parsed:
                definition = RULES[rule.name]
                if not definition.implicit and not is_validatable(value):
                    continue
                if definition.check(value, rule.params, ctx):
                    continue
                kind = size_kind(value, ctx) if definition.sized else "string"
                template = (
                    messages.get(f"{rule.name}.{field_name}")
                    or messages.get(rule.name)
                    or template_for(catalog, rule.name, kind)
                )
                errors[field_name] = [
                    format_message(template, _replacements(rule, field_name, names)),
                ]
                break

        return EvaluationResult.from_messages(errors)


def attribute_name(field: str, names: Mapping[str, str]) -> str:
    """Human-readable name for *field*: explicit name, or ``a_b.c`` → ``a b c``."""
    if field in names:
        return names[field]
    return field.replace("_", " ").replace(".", " ")


def _replacements(rule: ParsedRule, field: str, names: Mapping[str, str]) -> dict[str, str]:
    params = rule.params
    values: dict[str, str] = {"attribute": attribute_name(field, names)}

    match rule.name:
        case "between":
            values["min"], values["max"] = params[0], params[1]
        case "min":
            values["min"] = params[0]
        case "max":
            values["max"] = params[0]
        case "size":
            values["size"] = params[0]
        case "digits":
            values["digits"] = params[0]
        case "required_if" | "required_unless":
            values["other"] = attribute_name(params[0], names)
            values["value"] = ", ".join(params[1:])
        case "required_with" | "required_with_all" | "required_without" | "required_without_all":
            values["values"] = ", ".join(attribute_name(p, names) for p in params)
        case "same" | "different":
            values["other"] = attribute_name(params[0], names)
        case "in" | "not_in":
            values["values"] = ", ".join(params)
    return values
