"""Evaluation result — immutable snapshot of one validation pass."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


class FieldErrors(Mapping[str, tuple[str, ...]]):
    """Read-only mapping of field name to its error messages.

    Only fields with at least one error are present. Messages keep the
    order in which the rules were declared.

    Usage::

        errors = validator.errors
        if errors.has("email"):
            print(errors.first("email"))
        errors.get("name")  # () when the field is valid
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, list[str] | tuple[str, ...]] | None = None) -> None:
        frozen = {name: tuple(messages) for name, messages in (data or {}).items() if messages}
        object.__setattr__(self, "_data", MappingProxyType(frozen))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __getitem__(self, key: str) -> tuple[str, ...]:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FieldErrors({dict(self._data)!r})"

    def get(self, key: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:  # type: ignore[override]
        """Return the messages for *key*, or *default* (empty) if valid."""
        return self._data.get(key, default)

    def first(self, key: str) -> str | None:
        """Return the first message for *key*, or ``None``."""
        messages = self._data.get(key)
        if messages:
            return messages[0]
        return None

    def has(self, key: str) -> bool:
        """True if *key* has at least one error."""
        return key in self._data

    def all(self) -> dict[str, list[str]]:
        """Return a plain, mutable copy of every field's messages."""
        return {name: list(messages) for name, messages in self._data.items()}

    @property
    def count(self) -> int:
        """Total number of messages across all fields."""
        return sum(len(messages) for messages in self._data.values())


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """The outcome of evaluating a model against a rule set.

    ``is_valid`` is True when there are no errors.
    The result is falsy when invalid, so you can write::

        result = check(model, rules)
        if not result:
            show(result.errors)

    ``errors`` maps field names to tuples of error messages::

        {"name": ("The name field is required.",),
         "age": ("The age must be a number.",)}
    """

    errors: FieldErrors = field(default_factory=FieldErrors)

    @classmethod
    def from_messages(cls, messages: Mapping[str, list[str]]) -> EvaluationResult:
        """Build a result from a plain field → messages mapping."""
        return cls(errors=FieldErrors(messages))

    @property
    def error_count(self) -> int:
        """Total number of error messages."""
        return self.errors.count

    @property
    def is_valid(self) -> bool:
        """True if evaluation found no errors."""
        return self.error_count == 0

    def __bool__(self) -> bool:
        """Falsy when invalid, so ``if not result:`` reads naturally."""
        return self.is_valid
