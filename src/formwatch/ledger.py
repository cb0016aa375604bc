"""Dirty-field ledger — which fields are allowed to show their errors.

A field enters the ledger when it is validated on its own (usually
because it was mutated) or when a full-form validation finds an error
on it. Fields only ever leave all at once, through ``clear()``.
"""

from collections.abc import Iterator


class DirtyFieldLedger:
    """Set of field names currently eligible to display errors.

    ``pristine`` is True while the ledger is empty. ``snapshot()``
    returns a ``frozenset`` so callers can never write back into the
    ledger.
    """

    __slots__ = ("_fields",)

    def __init__(self) -> None:
        self._fields: set[str] = set()

    def mark_dirty(self, field: str) -> bool:
        """Mark *field* as touched. Returns True if it was newly added."""
        if field in self._fields:
            return False
        self._fields.add(field)
        return True

    def has(self, field: str) -> bool:
        return field in self._fields

    def clear(self) -> None:
        self._fields.clear()

    @property
    def pristine(self) -> bool:
        """True if no field has been touched yet."""
        return not self._fields

    def snapshot(self) -> frozenset[str]:
        """Return an immutable copy of the touched fields."""
        return frozenset(self._fields)

    def __contains__(self, field: object) -> bool:
        return field in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"DirtyFieldLedger({sorted(self._fields)!r})"
