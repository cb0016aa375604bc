"""Validation configuration.

ValidationConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from formwatch.errors import ConfigurationError
from formwatch.localization import LocalizationProvider
from formwatch.rules import RuleEngine, RuleEvaluator


@dataclass(frozen=True, slots=True)
class ValidationConfig:
    """What to validate and how. Immutable after creation.

    Only ``rules`` is required::

        config = ValidationConfig(
            rules={"name": "required", "age": "numeric|max:99"},
            model=ObservableDict(name="", age=None),
            attribute_names={"age": "Your age"},
        )

    Attributes:
        rules: Field name → rule expression, e.g.
            ``{"name": "required|between:5,20"}``.
        model: The data to validate. May also be set later through
            ``ModelValidator.set_model()``. Never copied.
        custom_errors: Rule (or ``"rule.field"``) → message. With a
            localization provider, each key is translated on every
            validation pass and the translation replaces the message.
        attribute_names: Field → attribute name used in messages,
            translated by key the same way.
        manual: If True, model mutations do not trigger validation;
            call ``validate_field()``/``validate_form()`` yourself.
        localization_provider: Adapter for your i18n system. Without
            one, the language comes from the environment and messages
            are used as given.
        rule_engine: Evaluates the rules. Defaults to ``RuleEvaluator``.
    """

    rules: Mapping[str, Any]
    model: Any = None
    custom_errors: Mapping[str, str] | None = None
    attribute_names: Mapping[str, str] | None = None
    manual: bool = False
    localization_provider: LocalizationProvider | None = None
    rule_engine: RuleEngine = field(default_factory=RuleEvaluator)

    def __post_init__(self) -> None:
        if not isinstance(self.rules, Mapping):
            msg = f"rules must be a mapping of field name to rules, got {type(self.rules).__name__}"
            raise ConfigurationError(msg)
        for name, value in (
            ("custom_errors", self.custom_errors),
            ("attribute_names", self.attribute_names),
        ):
            if value is not None and not isinstance(value, Mapping):
                msg = f"{name} must be a mapping, got {type(value).__name__}"
                raise ConfigurationError(msg)
