"""Message catalogs for the built-in rules.

Messages use ``:name`` placeholders::

    "The :attribute may not be greater than :max."

Sized rules (``min``, ``max``, ``between``, ``size``) have one message
per value kind: ``numeric``, ``string`` and ``array``.

Catalogs are keyed by two-letter language code. Unknown languages fall
back to English.
"""

import logging
import re
from collections.abc import Mapping
from typing import TypeAlias

logger = logging.getLogger("formwatch.rules")

DEFAULT_LOCALE = "en"

Catalog: TypeAlias = Mapping[str, str | Mapping[str, str]]

EN: Catalog = {
    "accepted": "The :attribute must be accepted.",
    "alpha": "The :attribute field must contain only alphabetic characters.",
    "alpha_dash": (
        "The :attribute field may only contain alpha-numeric characters, "
        "as well as dashes and underscores."
    ),
    "alpha_num": "The :attribute field must be alpha-numeric.",
    "array": "The :attribute must be a list.",
    "between": {
        "numeric": "The :attribute field must be between :min and :max.",
        "string": "The :attribute field must be between :min and :max characters.",
        "array": "The :attribute must have between :min and :max items.",
    },
    "boolean": "The :attribute field must be true or false.",
    "confirmed": "The :attribute confirmation does not match.",
    "date": "The :attribute is not a valid date format.",
    "different": "The :attribute and :other must be different.",
    "digits": "The :attribute must be :digits digits.",
    "email": "The :attribute format is invalid.",
    "in": "The selected :attribute is invalid.",
    "integer": "The :attribute must be an integer.",
    "max": {
        "numeric": "The :attribute may not be greater than :max.",
        "string": "The :attribute may not be greater than :max characters.",
        "array": "The :attribute may not have more than :max items.",
    },
    "min": {
        "numeric": "The :attribute must be at least :min.",
        "string": "The :attribute must be at least :min characters.",
        "array": "The :attribute must have at least :min items.",
    },
    "not_in": "The selected :attribute is invalid.",
    "numeric": "The :attribute must be a number.",
    "present": "The :attribute field must be present (but can be empty).",
    "regex": "The :attribute format is invalid.",
    "required": "The :attribute field is required.",
    "required_if": "The :attribute field is required when :other is :value.",
    "required_unless": "The :attribute field is required when :other is not :value.",
    "required_with": "The :attribute field is required when :values is not empty.",
    "required_with_all": "The :attribute field is required when :values are not empty.",
    "required_without": "The :attribute field is required when :values is empty.",
    "required_without_all": "The :attribute field is required when :values are empty.",
    "same": "The :attribute and :other fields must match.",
    "size": {
        "numeric": "The :attribute must be :size.",
        "string": "The :attribute must be :size characters.",
        "array": "The :attribute must contain :size items.",
    },
    "string": "The :attribute must be a string.",
    "url": "The :attribute format is invalid.",
}

DE: Catalog = {
    "accepted": ":attribute muss akzeptiert werden.",
    "alpha": ":attribute darf nur aus Buchstaben bestehen.",
    "alpha_dash": ":attribute darf nur aus Buchstaben, Zahlen, Binde- und Unterstrichen bestehen.",
    "alpha_num": ":attribute darf nur aus Buchstaben und Zahlen bestehen.",
    "array": ":attribute muss eine Liste sein.",
    "between": {
        "numeric": ":attribute muss zwischen :min und :max liegen.",
        "string": ":attribute muss zwischen :min und :max Zeichen lang sein.",
        "array": ":attribute muss zwischen :min und :max Elemente haben.",
    },
    "boolean": ":attribute muss wahr oder falsch sein.",
    "confirmed": ":attribute stimmt nicht mit der Bestätigung überein.",
    "date": ":attribute muss ein gültiges Datum sein.",
    "different": ":attribute und :other müssen sich unterscheiden.",
    "digits": ":attribute muss :digits Stellen haben.",
    "email": ":attribute muss eine gültige E-Mail-Adresse sein.",
    "in": "Der gewählte Wert für :attribute ist ungültig.",
    "integer": ":attribute muss eine ganze Zahl sein.",
    "max": {
        "numeric": ":attribute darf maximal :max sein.",
        "string": ":attribute darf maximal :max Zeichen haben.",
        "array": ":attribute darf maximal :max Elemente haben.",
    },
    "min": {
        "numeric": ":attribute muss mindestens :min sein.",
        "string": ":attribute muss mindestens :min Zeichen lang sein.",
        "array": ":attribute muss mindestens :min Elemente haben.",
    },
    "not_in": "Der gewählte Wert für :attribute ist ungültig.",
    "numeric": ":attribute muss eine Zahl sein.",
    "present": ":attribute muss vorhanden sein.",
    "regex": ":attribute Format ist ungültig.",
    "required": ":attribute muss ausgefüllt sein.",
    "required_if": ":attribute muss ausgefüllt sein, wenn :other :value ist.",
    "required_unless": ":attribute muss ausgefüllt sein, wenn :other nicht :value ist.",
    "required_with": ":attribute muss angegeben werden, wenn :values ausgefüllt wurde.",
    "required_with_all": ":attribute muss angegeben werden, wenn :values ausgefüllt wurden.",
    "required_without": ":attribute muss angegeben werden, wenn :values nicht ausgefüllt wurde.",
    "required_without_all": ":attribute muss angegeben werden, wenn keines der Felder :values ausgefüllt wurde.",
    "same": ":attribute und :other müssen übereinstimmen.",
    "size": {
        "numeric": ":attribute muss gleich :size sein.",
        "string": ":attribute muss :size Zeichen lang sein.",
        "array": ":attribute muss genau :size Elemente haben.",
    },
    "string": ":attribute muss ein String sein.",
    "url": ":attribute muss eine URL sein.",
}

CATALOGS: dict[str, Catalog] = {
    "en": EN,
    "de": DE,
}

_warned_locales: set[str] = set()


def catalog_for(locale: str) -> Catalog:
    """Return the catalog for *locale*, falling back to English."""
    catalog = CATALOGS.get(locale[:2].lower())
    if catalog is not None:
        return catalog
    if locale not in _warned_locales:
        _warned_locales.add(locale)
        logger.warning("No messages for locale %r, using %r", locale, DEFAULT_LOCALE)
    return CATALOGS[DEFAULT_LOCALE]


def template_for(catalog: Catalog, rule: str, kind: str) -> str:
    """Pick the message template for *rule* (and size *kind*)."""
    entry = catalog.get(rule) or EN.get(rule) or "The :attribute field is invalid."
    if isinstance(entry, Mapping):
        return entry.get(kind) or entry["string"]
    return entry


_PLACEHOLDER_RE = re.compile(r":([a-z_]+)")


def format_message(template: str, replacements: Mapping[str, str]) -> str:
    """Fill ``:name`` placeholders. Unknown placeholders are left as is."""

    def fill(match: re.Match[str]) -> str:
        return replacements.get(match.group(1), match.group(0))

    return _PLACEHOLDER_RE.sub(fill, template)
