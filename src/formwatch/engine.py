"""Validation engine — one evaluation pass over the whole model.

``check()`` is the single place where a model, a rule set and a
localization adapter meet:

1. The model is flattened into a plain ``dict`` (never mutated).
2. The language is read once and cut to a two-letter locale.
3. When a localization adapter is given, every custom-message key and
   attribute-name key is replaced by its translation.
4. The rule engine evaluates every field and returns a fresh,
   immutable ``EvaluationResult``.

Nothing is cached between passes. Configuration errors raised by the
rule engine propagate to the caller untouched.
"""

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any

from formwatch.localization import DEFAULT_LANGUAGE, LocalizationProvider, NoopLocalizationProvider
from formwatch.result import EvaluationResult
from formwatch.rules import RuleEngine, RuleEvaluator

logger = logging.getLogger("formwatch.engine")


def to_plain(model: Any) -> dict[str, Any]:
    """Return a plain field → value ``dict`` view of *model*.

    Handles ``None`` (empty), any ``Mapping`` (including
    ``ObservableDict``), dataclass instances and plain objects (public
    instance attributes). The model itself is left untouched; nested
    values are shared, not copied.
    """
    if model is None:
        return {}
    if isinstance(model, Mapping):
        return dict(model.items())
    if dataclasses.is_dataclass(model) and not isinstance(model, type):
        return {f.name: getattr(model, f.name) for f in dataclasses.fields(model)}
    try:
        attributes = vars(model)
    except TypeError:
        return {}
    return {name: value for name, value in attributes.items() if not name.startswith("_")}


def locale_from(language: str | None) -> str:
    """Two-letter, lower-case locale for *language* (``"de-AT"`` → ``"de"``)."""
    if not language or len(language) < 2:
        return DEFAULT_LANGUAGE
    return language[:2].lower()


def translate_keys(
    keys: Mapping[str, str] | None,
    localization: LocalizationProvider | None,
) -> dict[str, str] | None:
    """Map every key of *keys* to its translation.

    The values are fallbacks: they are passed through unchanged when no
    *localization* is configured.
    """
    if not keys:
        return None
    if localization is None:
        return dict(keys)
    return {key: localization.translate(key) for key in keys}


def check(
    model: Any,
    rules: Mapping[str, Any],
    custom_messages: Mapping[str, str] | None = None,
    attribute_names: Mapping[str, str] | None = None,
    localization: LocalizationProvider | None = None,
    rule_engine: RuleEngine | None = None,
) -> EvaluationResult:
    """Evaluate *model* against *rules* and return the result.

    Args:
        model: The model to validate, or ``None``.
        rules: Field name → rule expression.
        custom_messages: Rule (or ``"rule.field"``) → message. With a
            localization adapter, the message is the translation of the
            key instead.
        attribute_names: Field → attribute name, translated the same way.
        localization: Supplies the language and translations. Without
            one, the language is detected from the environment and
            custom messages and attribute names are used as given.
        rule_engine: Defaults to ``RuleEvaluator``.

    Raises:
        ConfigurationError: From the rule engine, for broken rules.
    """
    rule_engine = rule_engine or RuleEvaluator()

    values = to_plain(model)
    locale = locale_from((localization or NoopLocalizationProvider()).language())
    result = rule_engine.evaluate(
        values,
        rules,
        translate_keys(custom_messages, localization),
        locale=locale,
        attribute_names=translate_keys(attribute_names, localization),
    )
    logger.debug(
        "Checked %d field(s) [%s]: %d error(s)",
        len(rules),
        locale,
        result.error_count,
    )
    return result
