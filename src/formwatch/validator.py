"""ModelValidator — keeps a mutable model's validity up to date.

Binds a rule set to a model it does not own. Every qualifying mutation
of an observable model re-validates the *whole* model (rules like
``required_without`` need the other fields) and marks the mutated field
as touched, so its errors may now be shown. Untouched fields keep
their errors hidden until a full-form validation.

Example::

    data = ObservableDict(name="", age=12)
    validator = ModelValidator(ValidationConfig(
        rules={"name": "required", "age": "numeric|max:99"},
        model=data,
    ))

    validator.is_valid                    # False (name is empty)
    validator.show_errors_on_field("name")  # False, nobody touched it yet

    data["age"] = "x"                     # re-validates synchronously
    validator.errors.first("age")         # "The age must be a number."
    validator.show_errors_on_field("age")   # True

    validator.validate_form()             # False, and "name" is now shown too

Lifecycle: without a model the validator is *uninitialized* (it still
validates, against empty values); ``set_model()`` and ``reset()`` make
it *pristine*; any validate call that touches a field makes it dirty.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

from formwatch.config import ValidationConfig
from formwatch.engine import check
from formwatch.ledger import DirtyFieldLedger
from formwatch.observable import ADD, UPDATE, ModelChange, Subscription, observe
from formwatch.result import EvaluationResult, FieldErrors

logger = logging.getLogger("formwatch.validator")

# Change kinds that trigger validation; removals and custom kinds don't
_VALIDATING_KINDS = frozenset({ADD, UPDATE})


class ModelValidator:
    """Validates a model against a rule set and tracks touched fields.

    Runs synchronously on the calling thread. Not thread-safe: a single
    instance must only be used from one thread at a time.
    """

    __slots__ = ("_config", "_ledger", "_model", "_subscription", "_validation")

    def __init__(self, config: ValidationConfig) -> None:
        self._config = config
        self._model: Any = None
        self._subscription: Subscription | None = None
        self._ledger = DirtyFieldLedger()
        self._validation = EvaluationResult()

        if config.model is not None:
            self.set_model(config.model)
        else:
            self.reset()  # initial check on nothing

    # -- Model binding --------------------------------------------------------

    @property
    def model(self) -> Any:
        """The model being validated (``None`` if not set yet)."""
        return self._model

    def get_model(self) -> Any:
        return self._model

    def set_model(self, model: Any) -> None:
        """Validate *model* from now on.

        A different model replaces the subscription on the old one,
        clears all touched fields and re-validates immediately. Setting
        the same model again keeps the current state; after
        ``dispose()`` it only subscribes again.
        """
        if model is self._model:
            if self._subscription is None:
                self._subscribe(model)
            return
        self._unsubscribe()
        self._model = model
        self._ledger.clear()
        self._subscribe(model)
        self.reset()

    def set_rules(self, rules: Mapping[str, Any]) -> None:
        """Replace the rule set and reset."""
        self._config = dataclasses.replace(self._config, rules=rules)
        self.reset()

    def dispose(self) -> None:
        """Stop listening to the model. Safe to call more than once.

        The model is not modified and the last validation state stays
        readable. ``set_model()`` with the same model attaches again.
        """
        self._unsubscribe()

    def _subscribe(self, model: Any) -> None:
        if model is None or self._config.manual:
            return
        self._subscription = observe(model, self._model_changed)
        if self._subscription is None:
            logger.warning(
                "%s is not observable; validate_field()/validate_form() must be called explicitly",
                type(model).__name__,
            )
        else:
            logger.debug("Subscribed to %s", type(model).__name__)

    def _unsubscribe(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
            logger.debug("Unsubscribed from %s", type(self._model).__name__)

    def _model_changed(self, change: ModelChange) -> None:
        if change.kind not in _VALIDATING_KINDS:
            return
        if change.name:
            self.validate_field(change.name)
        else:
            self.validate_form()

    def __enter__(self) -> ModelValidator:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    # -- Validation -----------------------------------------------------------

    def _check(self) -> EvaluationResult:
        config = self._config
        return check(
            self._model,
            config.rules,
            config.custom_errors,
            config.attribute_names,
            config.localization_provider,
            config.rule_engine,
        )

    def reset(self) -> None:
        """Re-validate and forget all touched fields.

        Afterwards no errors are shown until fields are validated again.
        """
        self._validation = self._check()
        self._ledger.clear()

    def validate_field(self, field: str) -> bool:
        """Validate the model and mark *field* as touched.

        The whole model is always evaluated; only the display of errors
        is scoped to *field*.

        Returns:
            True if *field* has no errors.
        """
        result = self._check()
        self._ledger.mark_dirty(field)
        self._validation = result
        return not result.errors.has(field)

    def validate_form(self) -> bool:
        """Validate the model and mark every erroneous field as touched.

        Call this when the user tries to submit.

        Returns:
            True if the whole model is valid.
        """
        result = self._check()
        for field in result.errors:
            self._ledger.mark_dirty(field)
        self._validation = result
        return result.is_valid

    # -- State projection -----------------------------------------------------

    @property
    def validation(self) -> EvaluationResult:
        """The latest evaluation result, always for the whole model."""
        return self._validation

    @property
    def errors(self) -> FieldErrors:
        return self._validation.errors

    @property
    def error_count(self) -> int:
        return self._validation.error_count

    @property
    def is_valid(self) -> bool:
        """True if the model currently satisfies all rules."""
        return self.error_count == 0

    @property
    def pristine(self) -> bool:
        """True if no field has been touched since the last reset."""
        return self._ledger.pristine

    @property
    def fields_that_may_show_errors(self) -> frozenset[str]:
        return self._ledger.snapshot()

    def show_errors_on_field(self, field: str) -> bool:
        """Whether errors on *field* may be shown right now.

        This says nothing about whether the field actually has errors,
        only whether it has been validated and may display them.
        """
        return self._ledger.has(field)

    def visible_errors(self, field: str) -> tuple[str, ...]:
        """The messages to display for *field*: empty unless touched."""
        if not self.show_errors_on_field(field):
            return ()
        return self.errors.get(field)

    def __repr__(self) -> str:
        return (
            f"ModelValidator(model={type(self._model).__name__}, "
            f"errors={self.error_count}, touched={sorted(self._ledger)})"
        )
