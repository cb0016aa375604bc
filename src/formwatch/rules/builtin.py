"""Built-in rules for formwatch rule expressions.

Each rule is a predicate with the signature::

    def rule(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
        '''Return True if *value* passes.'''

and is registered under the name used in rule expressions
(``"required|numeric|max:99"``). The registry also records how many
parameters a rule needs and whether it is *implicit*: implicit rules
(the ``required*`` family, ``accepted``, ``present``) always run, every
other rule is skipped while the field is empty.

Failure messages live in ``formwatch.rules.messages``.
"""

import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from typing import Any, TypeAlias

Rule: TypeAlias = Callable[[Any, tuple[str, ...], "RuleContext"], bool]


class _Missing:
    """Marker for a field that is absent from the model."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True, slots=True)
class RuleDef:
    """Registry entry for a rule.

    Attributes:
        name: Name used in rule expressions.
        check: The predicate.
        params: Minimum number of parameters.
        numeric_params: Parameters must parse as numbers.
        implicit: Runs even when the field is empty.
        sized: Message depends on the value kind (numeric/string/array).
    """

    name: str
    check: Rule
    params: int = 0
    numeric_params: bool = False
    implicit: bool = False
    sized: bool = False


RULES: dict[str, RuleDef] = {}


def _rule(
    name: str,
    *,
    params: int = 0,
    numeric_params: bool = False,
    implicit: bool = False,
    sized: bool = False,
) -> Callable[[Rule], Rule]:
    def register(check: Rule) -> Rule:
        RULES[name] = RuleDef(name, check, params, numeric_params, implicit, sized)
        return check

    return register


# ---------------------------------------------------------------------------
# Evaluation context
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RuleContext:
    """What a rule can see besides its own value.

    Attributes:
        values: The whole model as a plain mapping.
        field: The field being validated.
        rule_names: Names of all rules declared on that field.
    """

    values: Mapping[str, Any]
    field: str
    rule_names: frozenset[str] = frozenset()

    @property
    def numeric(self) -> bool:
        """True if the field declares itself numeric."""
        return "numeric" in self.rule_names or "integer" in self.rule_names

    def lookup(self, name: str) -> Any:
        """Return the value of *name*, resolving dotted paths.

        ``"address.city"`` is looked up as a literal key first and then
        by walking nested mappings, sequences and attributes. Returns
        ``MISSING`` when any step is absent.
        """
        if name in self.values:
            return self.values[name]
        current: Any = self.values
        for part in name.split("."):
            if isinstance(current, Mapping):
                current = current.get(part, MISSING)
            elif isinstance(current, Sequence) and not isinstance(current, str) and part.isdigit():
                index = int(part)
                current = current[index] if index < len(current) else MISSING
            elif current is None or current is MISSING:
                return MISSING
            else:
                current = getattr(current, part, MISSING)
            if current is MISSING:
                return MISSING
        return current


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_filled(value: Any) -> bool:
    """The ``required`` test: not missing, not None, not blank, not empty."""
    if value is None or value is MISSING:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, Sequence | Mapping | set | frozenset):
        return len(value) > 0
    return True


def is_validatable(value: Any) -> bool:
    """Non-implicit rules only run on filled values (and on any list)."""
    if isinstance(value, list | tuple):
        return True
    return is_filled(value)


def to_number(value: Any) -> float | None:
    """Parse *value* as a finite number, or return ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def size_kind(value: Any, ctx: RuleContext) -> str:
    """How a sized rule measures *value*: ``numeric``, ``array`` or ``string``."""
    if ctx.numeric and to_number(value) is not None:
        return "numeric"
    if isinstance(value, list | tuple):
        return "array"
    if isinstance(value, int | float) and not isinstance(value, bool):
        return "numeric"
    return "string"


def size_of(value: Any, ctx: RuleContext) -> float:
    kind = size_kind(value, ctx)
    if kind == "numeric":
        return to_number(value) or 0.0
    if kind == "array":
        return float(len(value))
    return float(len(str(value)))


@lru_cache(maxsize=256)
def compile_regex(param: str) -> re.Pattern[str]:
    """Compile a ``regex`` parameter.

    Accepts a bare pattern or the delimited ``/pattern/flags`` form
    with flags from ``i``, ``m``, ``s``, ``x``.
    """
    flags = 0
    pattern = param
    delimited = re.fullmatch(r"/(.*)/([imsx]*)", param, re.DOTALL)
    if delimited:
        pattern = delimited.group(1)
        for flag in delimited.group(2):
            flags |= {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}[flag]
    return re.compile(pattern, flags)


def _others_filled(fields: tuple[str, ...], ctx: RuleContext) -> list[bool]:
    return [is_filled(ctx.lookup(name)) for name in fields]


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ---------------------------------------------------------------------------
# Presence (implicit)
# ---------------------------------------------------------------------------


@_rule("required", implicit=True)
def required(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return is_filled(value)


@_rule("required_if", params=2, implicit=True)
def required_if(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    other, *expected = params
    if _as_text(ctx.lookup(other)) in expected:
        return is_filled(value)
    return True


@_rule("required_unless", params=2, implicit=True)
def required_unless(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    other, *expected = params
    if _as_text(ctx.lookup(other)) not in expected:
        return is_filled(value)
    return True


@_rule("required_with", params=1, implicit=True)
def required_with(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    if any(_others_filled(params, ctx)):
        return is_filled(value)
    return True


@_rule("required_with_all", params=1, implicit=True)
def required_with_all(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    if all(_others_filled(params, ctx)):
        return is_filled(value)
    return True


@_rule("required_without", params=1, implicit=True)
def required_without(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    if not all(_others_filled(params, ctx)):
        return is_filled(value)
    return True


@_rule("required_without_all", params=1, implicit=True)
def required_without_all(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    if not any(_others_filled(params, ctx)):
        return is_filled(value)
    return True


_ACCEPTED = frozenset({"on", "yes", "1", "true"})


@_rule("accepted", implicit=True)
def accepted(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    if value is True:
        return True
    if isinstance(value, int) and not isinstance(value, bool):
        return value == 1
    return isinstance(value, str) and value.strip().lower() in _ACCEPTED


@_rule("present", implicit=True)
def present(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return value is not MISSING


# ---------------------------------------------------------------------------
# Type
# ---------------------------------------------------------------------------


@_rule("string")
def string(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return isinstance(value, str)


@_rule("numeric")
def numeric(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return to_number(value) is not None


_INTEGER_RE = re.compile(r"^[+-]?\d+$")


@_rule("integer")
def integer(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, str) and bool(_INTEGER_RE.match(value.strip()))


_BOOLEANS = frozenset({"0", "1", "true", "false"})


@_rule("boolean")
def boolean(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    if isinstance(value, bool):
        return True
    if isinstance(value, int):
        return value in (0, 1)
    return isinstance(value, str) and value.strip().lower() in _BOOLEANS


@_rule("array")
def array(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return isinstance(value, list | tuple)


@_rule("date")
def date_(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    if isinstance(value, date):
        return True
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


# ---------------------------------------------------------------------------
# Size
# ---------------------------------------------------------------------------


@_rule("min", params=1, numeric_params=True, sized=True)
def min_(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return size_of(value, ctx) >= float(params[0])


@_rule("max", params=1, numeric_params=True, sized=True)
def max_(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return size_of(value, ctx) <= float(params[0])


@_rule("between", params=2, numeric_params=True, sized=True)
def between(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    size = size_of(value, ctx)
    return float(params[0]) <= size <= float(params[1])


@_rule("size", params=1, numeric_params=True, sized=True)
def size(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return size_of(value, ctx) == float(params[0])


@_rule("digits", params=1, numeric_params=True)
def digits(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    text = _as_text(value).strip()
    return text.isdigit() and text.isascii() and len(text) == int(float(params[0]))


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

# Structure only, not deliverability
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")

# http(s) scheme plus a host
_URL_RE = re.compile(r"^https?://[^\s/$.?#].\S*$", re.IGNORECASE)

_ALPHA_RE = re.compile(r"^[a-zA-Z]+$")
_ALPHA_NUM_RE = re.compile(r"^[a-zA-Z0-9]+$")
_ALPHA_DASH_RE = re.compile(r"^[a-zA-Z0-9_\-]+$")


@_rule("email")
def email(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return isinstance(value, str) and bool(_EMAIL_RE.match(value))


@_rule("url")
def url(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return isinstance(value, str) and bool(_URL_RE.match(value))


@_rule("alpha")
def alpha(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return bool(_ALPHA_RE.match(_as_text(value)))


@_rule("alpha_num")
def alpha_num(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return bool(_ALPHA_NUM_RE.match(_as_text(value)))


@_rule("alpha_dash")
def alpha_dash(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return bool(_ALPHA_DASH_RE.match(_as_text(value)))


@_rule("regex", params=1)
def regex(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return compile_regex(params[0]).search(_as_text(value)) is not None


# ---------------------------------------------------------------------------
# Choice and comparison
# ---------------------------------------------------------------------------


@_rule("in", params=1)
def in_(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    if isinstance(value, list | tuple):
        return all(_as_text(item) in params for item in value)
    return _as_text(value) in params


@_rule("not_in", params=1)
def not_in(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    if isinstance(value, list | tuple):
        return not any(_as_text(item) in params for item in value)
    return _as_text(value) not in params


@_rule("same", params=1)
def same(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return value == ctx.lookup(params[0])


@_rule("different", params=1)
def different(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return value != ctx.lookup(params[0])


@_rule("confirmed")
def confirmed(value: Any, params: tuple[str, ...], ctx: RuleContext) -> bool:
    return value == ctx.lookup(f"{ctx.field}_confirmation")
