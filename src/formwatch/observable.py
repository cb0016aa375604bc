"""Observable models — synchronous change notification for validation.

The validator does not depend on any particular state framework. A
model is observable when it has a ``subscribe(listener)`` method that
returns a ``Subscription`` and calls ``listener(ModelChange(...))``
synchronously whenever one of its fields changes.

Two ready-made shapes are provided:

- ``ObservableDict``: a mutable mapping.
- ``Observable``: a base class for attribute-style models, works
  with ``@dataclass`` (but not ``slots=True``)::

      @dataclass
      class Signup(Observable):
          name: str = ""
          age: int | None = None

      signup = Signup()
      sub = signup.subscribe(print)
      signup.name = "alice"  # ModelChange(kind='update', name='name', ...)
      sub.unsubscribe()
"""

from collections.abc import Callable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias, runtime_checkable

# ---------------------------------------------------------------------------
# Change events
# ---------------------------------------------------------------------------

ADD = "add"
UPDATE = "update"
REMOVE = "remove"


@dataclass(frozen=True, slots=True)
class ModelChange:
    """Emitted by an observable model after a mutation.

    Attributes:
        kind: ``"add"`` (new field), ``"update"`` (changed field or bulk
            replace) or ``"remove"``. Other kinds are allowed and are
            ignored by the validator.
        name: The mutated field, or ``None`` when the change is not
            attributable to a single field (bulk replace).
        old_value: Value before the change, if any.
        new_value: Value after the change, if any.
    """

    kind: str
    name: str | None = None
    old_value: Any = None
    new_value: Any = None


ChangeListener: TypeAlias = Callable[[ModelChange], None]


class Subscription:
    """Handle returned by ``subscribe()``.

    ``unsubscribe()`` is idempotent and only detaches the listener;
    the model itself is never modified. Calling the subscription is the
    same as calling ``unsubscribe()``.
    """

    __slots__ = ("_detach",)

    def __init__(self, detach: Callable[[], None]) -> None:
        self._detach: Callable[[], None] | None = detach

    @property
    def active(self) -> bool:
        return self._detach is not None

    def unsubscribe(self) -> None:
        detach, self._detach = self._detach, None
        if detach is not None:
            detach()

    def __call__(self) -> None:
        self.unsubscribe()


@runtime_checkable
class ObservableModel(Protocol):
    """Anything that notifies listeners about field mutations."""

    def subscribe(self, listener: ChangeListener) -> Subscription: ...


def observe(model: object, listener: ChangeListener) -> Subscription | None:
    """Subscribe *listener* to *model* if it is observable.

    Returns ``None`` for plain models that cannot notify.
    """
    if isinstance(model, ObservableModel):
        return model.subscribe(listener)
    return None


# ---------------------------------------------------------------------------
# Listener fan-out
# ---------------------------------------------------------------------------


class _Listeners:
    """Ordered set of listeners with synchronous delivery.

    Delivery iterates over a copy so listeners may unsubscribe while an
    event is being dispatched. Listener exceptions propagate to the
    code that caused the mutation.
    """

    __slots__ = ("_listeners",)

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def add(self, listener: ChangeListener) -> Subscription:
        self._listeners.append(listener)

        def detach() -> None:
            # Remove by identity: bound methods compare equal across instances
            for i, existing in enumerate(self._listeners):
                if existing is listener:
                    del self._listeners[i]
                    return

        return Subscription(detach)

    def emit(self, change: ModelChange) -> None:
        for listener in list(self._listeners):
            listener(change)

    def __len__(self) -> int:
        return len(self._listeners)


# ---------------------------------------------------------------------------
# ObservableDict
# ---------------------------------------------------------------------------


class ObservableDict(MutableMapping[str, Any]):
    """A mutable string-keyed mapping that notifies on every change.

    Setting a new key emits ``add``, changing an existing key emits
    ``update`` (only when the value actually changed), deleting emits
    ``remove`` and ``replace()`` emits a single ``update`` with no field
    name.
    """

    __slots__ = ("_data", "_listeners")

    def __init__(self, data: Mapping[str, Any] | None = None, /, **kwargs: Any) -> None:
        self._data: dict[str, Any] = {**(data or {}), **kwargs}
        self._listeners = _Listeners()

    def subscribe(self, listener: ChangeListener) -> Subscription:
        return self._listeners.add(listener)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key in self._data:
            old = self._data[key]
            self._data[key] = value
            if old is not value and old != value:
                self._listeners.emit(ModelChange(UPDATE, key, old, value))
        else:
            self._data[key] = value
            self._listeners.emit(ModelChange(ADD, key, None, value))

    def __delitem__(self, key: str) -> None:
        old = self._data.pop(key)
        self._listeners.emit(ModelChange(REMOVE, key, old, None))

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ObservableDict({self._data!r})"

    def update(self, data: Mapping[str, Any] | None = None, /, **kwargs: Any) -> None:  # type: ignore[override]
        """Set several keys, one notification per key."""
        for key, value in {**(data or {}), **kwargs}.items():
            self[key] = value

    def replace(self, data: Mapping[str, Any]) -> None:
        """Swap the whole content, emitting one field-less ``update``."""
        self._data = dict(data)
        self._listeners.emit(ModelChange(UPDATE, None, None, None))

    def to_dict(self) -> dict[str, Any]:
        """Return a plain ``dict`` copy."""
        return dict(self._data)


# ---------------------------------------------------------------------------
# Observable base class
# ---------------------------------------------------------------------------

_LISTENERS_ATTR = "_formwatch_listeners"


class Observable:
    """Mixin for attribute-style models that notifies on assignment.

    Assigning a public attribute emits ``add`` the first time and
    ``update`` afterwards (only when the value changed). Attributes
    starting with ``_`` are private and never notify.
    """

    def subscribe(self, listener: ChangeListener) -> Subscription:
        listeners = self.__dict__.get(_LISTENERS_ATTR)
        if listeners is None:
            listeners = _Listeners()
            object.__setattr__(self, _LISTENERS_ATTR, listeners)
        return listeners.add(listener)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        existed = name in self.__dict__
        old = self.__dict__.get(name)
        object.__setattr__(self, name, value)
        listeners: _Listeners | None = self.__dict__.get(_LISTENERS_ATTR)
        if not listeners:
            return
        if not existed:
            listeners.emit(ModelChange(ADD, name, None, value))
        elif old is not value and old != value:
            listeners.emit(ModelChange(UPDATE, name, old, value))

    def __delattr__(self, name: str) -> None:
        old = self.__dict__.get(name)
        object.__delattr__(self, name)
        listeners: _Listeners | None = self.__dict__.get(_LISTENERS_ATTR)
        if listeners and not name.startswith("_"):
            listeners.emit(ModelChange(REMOVE, name, old, None))
