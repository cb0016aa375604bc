"""Rule expression grammar.

A field's rules are written either as one pipe-separated string::

    "required|numeric|between:0,100"

or as a sequence of single rules, which is the only way to use a pipe
inside a ``regex`` pattern::

    ["required", "regex:^(yes|no)$"]

Each rule is ``name`` or ``name:params``; parameters are split on
commas, except for ``regex`` which takes its parameter verbatim.

Every problem is a ``ConfigurationError`` naming the offending field.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache

from formwatch.errors import ConfigurationError
from formwatch.rules.builtin import RULES, compile_regex

# Rules whose single parameter may itself contain commas
_VERBATIM_PARAMS = frozenset({"regex"})


@dataclass(frozen=True, slots=True)
class ParsedRule:
    """One rule of a field, e.g. ``max:99`` → ``ParsedRule("max", ("99",))``."""

    name: str
    params: tuple[str, ...] = ()

    def __str__(self) -> str:
        if not self.params:
            return self.name
        return f"{self.name}:{','.join(self.params)}"


def parse_rule(item: str, *, field: str) -> ParsedRule:
    """Parse a single ``name[:params]`` rule and check it is usable."""
    name, sep, raw = item.strip().partition(":")
    name = name.strip()
    if not name:
        raise ConfigurationError(f"empty rule in {item!r}", field=field)
    definition = RULES.get(name)
    if definition is None:
        raise ConfigurationError(f"unknown rule {name!r}", field=field)

    if not sep:
        params: tuple[str, ...] = ()
    elif name in _VERBATIM_PARAMS:
        params = (raw,)
    else:
        params = tuple(p.strip() for p in raw.split(","))

    if len(params) < definition.params or any(p == "" for p in params):
        raise ConfigurationError(
            f"rule {name!r} needs {definition.params} parameter(s), got {item!r}",
            field=field,
        )
    if definition.numeric_params:
        for param in params:
            try:
                float(param)
            except ValueError:
                raise ConfigurationError(
                    f"rule {name!r} expects numeric parameters, got {param!r}",
                    field=field,
                ) from None
    if name == "regex":
        try:
            compile_regex(params[0])
        except re.error as exc:
            raise ConfigurationError(f"invalid regex {params[0]!r}: {exc}", field=field) from exc
    return ParsedRule(name, params)


@lru_cache(maxsize=512)
def _parse_string(expression: str, field: str) -> tuple[ParsedRule, ...]:
    return tuple(parse_rule(item, field=field) for item in expression.split("|"))


def parse_rules(expression: object, *, field: str) -> tuple[ParsedRule, ...]:
    """Parse a field's rule expression into its rules, in declared order.

    Raises:
        ConfigurationError: unknown rule, missing or malformed
            parameters, or an expression that is neither a string nor a
            sequence of strings.
    """
    if isinstance(expression, str):
        return _parse_string(expression, field)
    if isinstance(expression, Sequence):
        rules: list[ParsedRule] = []
        for item in expression:
            if not isinstance(item, str):
                raise ConfigurationError(f"rule must be a string, got {item!r}", field=field)
            rules.append(parse_rule(item, field=field))
        return tuple(rules)
    raise ConfigurationError(
        f"rules must be a string or a list of strings, got {type(expression).__name__}",
        field=field,
    )
