"""Formwatch exception hierarchy.

Shared across the rule evaluator, the validation engine and the
validator so every module raises and catches the same types.

Failing rules are *not* errors: they are recorded in an
``EvaluationResult``. Only a broken setup raises.
"""


class FormwatchError(Exception):
    """Base for all formwatch-specific errors."""


class ConfigurationError(FormwatchError):
    """Raised when the validation setup is invalid.

    Typically an unknown rule name, a malformed rule expression, or a
    rule set that is not a mapping. Never caught by the validator: it
    propagates out of construction, ``set_model()``, ``set_rules()``,
    ``validate_field()``, ``validate_form()`` and out of whatever call
    mutated an observed model.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        if field is not None:
            message = f"{field}: {message}"
        super().__init__(message)
