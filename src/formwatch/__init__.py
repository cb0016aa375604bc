"""Formwatch — reactive validation for mutable models.

Binds declarative per-field rules to a model that can change from
anywhere, and keeps validity state (valid flag, error count, per-field
errors, touched fields) current without callers re-triggering checks.

Basic usage::

    from formwatch import ModelValidator, ObservableDict, ValidationConfig

    signup = ObservableDict(name="", age=None, birthday=None)
    validator = ModelValidator(ValidationConfig(
        rules={
            "name": "required|between:3,32",
            "age": "numeric|max:99",
            "birthday": "date|required_without:age",
        },
        model=signup,
    ))

    signup["name"] = "Al"
    validator.visible_errors("name")
    # ("The name field must be between 3 and 32 characters.",)

    if not validator.validate_form():
        ...
"""

__version__ = "0.1.0"
__all__ = [
    "CatalogLocalizationProvider",
    "ConfigurationError",
    "DirtyFieldLedger",
    "EvaluationResult",
    "FieldErrors",
    "FormwatchError",
    "LocalizationProvider",
    "ModelChange",
    "ModelValidator",
    "NoopLocalizationProvider",
    "Observable",
    "ObservableDict",
    "RuleEngine",
    "RuleEvaluator",
    "Subscription",
    "ValidationConfig",
    "check",
]

# name -> module holding it
_LAZY_IMPORTS: dict[str, str] = {
    "CatalogLocalizationProvider": "formwatch.localization",
    "ConfigurationError": "formwatch.errors",
    "DirtyFieldLedger": "formwatch.ledger",
    "EvaluationResult": "formwatch.result",
    "FieldErrors": "formwatch.result",
    "FormwatchError": "formwatch.errors",
    "LocalizationProvider": "formwatch.localization",
    "ModelChange": "formwatch.observable",
    "ModelValidator": "formwatch.validator",
    "NoopLocalizationProvider": "formwatch.localization",
    "Observable": "formwatch.observable",
    "ObservableDict": "formwatch.observable",
    "RuleEngine": "formwatch.rules",
    "RuleEvaluator": "formwatch.rules",
    "Subscription": "formwatch.observable",
    "ValidationConfig": "formwatch.config",
    "check": "formwatch.engine",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import formwatch`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
