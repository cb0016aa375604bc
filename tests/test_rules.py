"""Tests for formwatch.rules — grammar, built-in rules and the evaluator."""

from datetime import date

import pytest

from formwatch.errors import ConfigurationError
from formwatch.rules import MISSING, ParsedRule, RuleContext, RuleEvaluator, parse_rule, parse_rules
from formwatch.rules.builtin import RULES, is_filled, to_number


def _passes(rule: str, value: object, **values: object) -> bool:
    """Run a single rule expression against *value* in a one-field model."""
    parsed = parse_rule(rule, field="f")
    ctx = RuleContext(values={"f": value, **values}, field="f", rule_names=frozenset({parsed.name}))
    return RULES[parsed.name].check(value, parsed.params, ctx)


def _errors(values: dict, rules: dict, **kwargs: object) -> dict[str, list[str]]:
    return RuleEvaluator().evaluate(values, rules, **kwargs).errors.all()


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------


class TestGrammar:
    def test_pipe_separated(self) -> None:
        assert parse_rules("required|numeric|max:99", field="age") == (
            ParsedRule("required"),
            ParsedRule("numeric"),
            ParsedRule("max", ("99",)),
        )

    def test_params_split_on_comma(self) -> None:
        assert parse_rules("between:3, 32", field="name") == (ParsedRule("between", ("3", "32")),)

    def test_list_form_keeps_regex_pipes(self) -> None:
        rules = parse_rules(["required", "regex:^(yes|no),?$"], field="answer")
        assert rules[1] == ParsedRule("regex", ("^(yes|no),?$",))

    def test_str_roundtrip(self) -> None:
        assert str(ParsedRule("between", ("1", "2"))) == "between:1,2"
        assert str(ParsedRule("required")) == "required"

    def test_unknown_rule(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown rule 'requird'") as exc_info:
            parse_rules("requird", field="name")
        assert exc_info.value.field == "name"

    def test_empty_segment(self) -> None:
        with pytest.raises(ConfigurationError, match="empty rule"):
            parse_rules("required||numeric", field="age")

    def test_missing_params(self) -> None:
        with pytest.raises(ConfigurationError, match="needs 2 parameter"):
            parse_rules("between:3", field="name")

    def test_non_numeric_params(self) -> None:
        with pytest.raises(ConfigurationError, match="numeric parameters"):
            parse_rules("max:lots", field="age")

    def test_invalid_regex(self) -> None:
        with pytest.raises(ConfigurationError, match="invalid regex"):
            parse_rules(["regex:(unclosed"], field="code")

    def test_wrong_expression_type(self) -> None:
        with pytest.raises(ConfigurationError, match="string or a list"):
            parse_rules(42, field="age")

    def test_non_string_item(self) -> None:
        with pytest.raises(ConfigurationError, match="must be a string"):
            parse_rules(["required", 3], field="age")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    @pytest.mark.parametrize("value", [None, MISSING, "", "   ", [], {}])
    def test_not_filled(self, value: object) -> None:
        assert not is_filled(value)

    @pytest.mark.parametrize("value", ["x", 0, False, [1], date(2020, 1, 1)])
    def test_filled(self, value: object) -> None:
        assert is_filled(value)

    def test_to_number(self) -> None:
        assert to_number("12.5") == 12.5
        assert to_number(3) == 3.0
        assert to_number(True) is None
        assert to_number("nan") is None
        assert to_number("x") is None

    def test_lookup_dotted_path(self) -> None:
        ctx = RuleContext(values={"address": {"city": "Berlin"}, "tags": ["a"]}, field="x")
        assert ctx.lookup("address.city") == "Berlin"
        assert ctx.lookup("tags.0") == "a"
        assert ctx.lookup("tags.5") is MISSING
        assert ctx.lookup("address.zip") is MISSING
        assert ctx.lookup("nope") is MISSING


# ---------------------------------------------------------------------------
# Built-in rules
# ---------------------------------------------------------------------------


class TestPresenceRules:
    def test_required(self) -> None:
        assert _passes("required", "x")
        assert not _passes("required", "")
        assert not _passes("required", None)

    def test_required_if(self) -> None:
        assert not _passes("required_if:kind,company", "", kind="company")
        assert _passes("required_if:kind,company", "", kind="person")

    def test_required_unless(self) -> None:
        assert _passes("required_unless:kind,person", "", kind="person")
        assert not _passes("required_unless:kind,person", "", kind="company")

    def test_required_with(self) -> None:
        assert not _passes("required_with:a,b", None, a="x")
        assert _passes("required_with:a,b", None)

    def test_required_with_all(self) -> None:
        assert _passes("required_with_all:a,b", None, a="x")
        assert not _passes("required_with_all:a,b", None, a="x", b="y")

    def test_required_without(self) -> None:
        assert not _passes("required_without:a,b", None, a="x")
        assert _passes("required_without:a,b", None, a="x", b="y")

    def test_required_without_all(self) -> None:
        assert _passes("required_without_all:a,b", None, a="x")
        assert not _passes("required_without_all:a,b", None)

    def test_accepted(self) -> None:
        for value in ("yes", "on", "1", "true", 1, True):
            assert _passes("accepted", value)
        assert not _passes("accepted", "no")
        assert not _passes("accepted", False)

    def test_present(self) -> None:
        assert _passes("present", "")
        assert not _passes("present", MISSING)


class TestTypeRules:
    def test_numeric(self) -> None:
        assert _passes("numeric", "12")
        assert _passes("numeric", 12.5)
        assert not _passes("numeric", "x")
        assert not _passes("numeric", True)

    def test_integer(self) -> None:
        assert _passes("integer", 12)
        assert _passes("integer", "-7")
        assert _passes("integer", 3.0)
        assert not _passes("integer", "3.14")
        assert not _passes("integer", False)

    def test_string(self) -> None:
        assert _passes("string", "x")
        assert not _passes("string", 1)

    def test_boolean(self) -> None:
        for value in (True, False, 0, 1, "true", "0"):
            assert _passes("boolean", value)
        assert not _passes("boolean", "maybe")

    def test_array(self) -> None:
        assert _passes("array", [1])
        assert not _passes("array", "x")

    def test_date(self) -> None:
        assert _passes("date", date(2006, 7, 17))
        assert _passes("date", "2006-07-17")
        assert _passes("date", "2006-07-17T10:00:00")
        assert not _passes("date", "17/07/2006x")
        assert not _passes("date", 12)


class TestSizeRules:
    def test_numeric_field_compares_value(self) -> None:
        parsed = parse_rules("numeric|max:99", field="age")
        ctx = RuleContext(values={"age": "100"}, field="age", rule_names=frozenset({"numeric", "max"}))
        assert not RULES["max"].check("100", parsed[1].params, ctx)

    def test_string_compares_length(self) -> None:
        assert _passes("max:3", "abc")
        assert not _passes("max:3", "abcd")
        assert _passes("min:3", "abc")
        assert not _passes("min:3", "ab")

    def test_plain_number_compares_value(self) -> None:
        assert _passes("max:99", 12)
        assert not _passes("max:99", 120)

    def test_list_compares_length(self) -> None:
        assert _passes("size:2", [1, 2])
        assert not _passes("size:2", [1])

    def test_between(self) -> None:
        assert _passes("between:3,5", "abcd")
        assert not _passes("between:3,5", "abcdef")

    def test_digits(self) -> None:
        assert _passes("digits:4", "2024")
        assert _passes("digits:4", 2024)
        assert not _passes("digits:4", "202")
        assert not _passes("digits:4", "20a4")


class TestFormatRules:
    def test_email(self) -> None:
        assert _passes("email", "user@example.com")
        assert not _passes("email", "userexample.com")

    def test_url(self) -> None:
        assert _passes("url", "https://example.com")
        assert not _passes("url", "ftp://example.com")

    def test_alpha_family(self) -> None:
        assert _passes("alpha", "abc")
        assert not _passes("alpha", "abc1")
        assert _passes("alpha_num", "abc1")
        assert not _passes("alpha_num", "abc-1")
        assert _passes("alpha_dash", "abc-1_x")
        assert not _passes("alpha_dash", "abc 1")

    def test_regex(self) -> None:
        assert _passes("regex:^\\d{3}$", "123")
        assert not _passes("regex:^\\d{3}$", "12")

    def test_regex_delimited_flags(self) -> None:
        assert _passes("regex:/^abc$/i", "ABC")


class TestComparisonRules:
    def test_in(self) -> None:
        assert _passes("in:red,green", "red")
        assert not _passes("in:red,green", "blue")
        assert _passes("in:red,green", ["red", "green"])

    def test_not_in(self) -> None:
        assert _passes("not_in:admin,root", "alice")
        assert not _passes("not_in:admin,root", "root")

    def test_same_and_different(self) -> None:
        assert _passes("same:other", "x", other="x")
        assert not _passes("same:other", "x", other="y")
        assert _passes("different:other", "x", other="y")

    def test_confirmed(self) -> None:
        assert _passes("confirmed", "secret", f_confirmation="secret")
        assert not _passes("confirmed", "secret", f_confirmation="other")


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class TestRuleEvaluator:
    def test_all_valid(self) -> None:
        assert _errors({"name": "alice", "age": 12}, {"name": "required", "age": "numeric|max:99"}) == {}

    def test_required_message(self) -> None:
        assert _errors({"name": ""}, {"name": "required"}) == {
            "name": ["The name field is required."],
        }

    def test_first_failure_short_circuits(self) -> None:
        errors = _errors({"age": "x"}, {"age": "integer|between:0,100"})
        assert errors == {"age": ["The age must be an integer."]}

    def test_numeric_size_message(self) -> None:
        errors = _errors({"age": 120}, {"age": "numeric|max:99"})
        assert errors == {"age": ["The age may not be greater than 99."]}

    def test_string_size_message(self) -> None:
        errors = _errors({"name": "Al"}, {"name": "required|between:3,32"})
        assert errors == {"name": ["The name field must be between 3 and 32 characters."]}

    def test_empty_value_skips_non_implicit_rules(self) -> None:
        assert _errors({"email": "", "age": None}, {"email": "email", "age": "numeric|max:99"}) == {}

    def test_missing_field_is_empty(self) -> None:
        assert _errors({}, {"name": "required"}) == {"name": ["The name field is required."]}

    def test_cross_field_message(self) -> None:
        errors = _errors({"age": None, "birthday": None}, {"birthday": "date|required_without:age"})
        assert errors == {"birthday": ["The birthday field is required when age is empty."]}

    def test_underscores_become_spaces(self) -> None:
        errors = _errors({}, {"first_name": "required"})
        assert errors == {"first_name": ["The first name field is required."]}

    def test_dotted_field(self) -> None:
        errors = _errors({"address": {"city": ""}}, {"address.city": "required"})
        assert errors == {"address.city": ["The address city field is required."]}

    def test_attribute_names(self) -> None:
        errors = _errors(
            {"age": None, "birthday": None},
            {"birthday": "required_without:age"},
            attribute_names={"birthday": "date of birth", "age": "your age"},
        )
        assert errors == {"birthday": ["The date of birth field is required when your age is empty."]}

    def test_custom_message_for_rule(self) -> None:
        errors = _errors({"name": ""}, {"name": "required"}, custom_messages={"required": "Fill in :attribute!"})
        assert errors == {"name": ["Fill in name!"]}

    def test_custom_message_for_field_wins(self) -> None:
        errors = _errors(
            {"name": "", "city": ""},
            {"name": "required", "city": "required"},
            custom_messages={"required": "Missing.", "required.name": "Who are you?"},
        )
        assert errors == {"name": ["Who are you?"], "city": ["Missing."]}

    def test_german_locale(self) -> None:
        errors = _errors({"age": "x"}, {"age": "numeric"}, locale="de")
        assert errors == {"age": ["age muss eine Zahl sein."]}

    def test_unknown_locale_falls_back_to_english(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="formwatch.rules"):
            errors = _errors({"age": "x"}, {"age": "numeric"}, locale="xx")
        assert errors == {"age": ["The age must be a number."]}

    def test_rules_must_be_mapping(self) -> None:
        with pytest.raises(ConfigurationError, match="mapping"):
            RuleEvaluator().evaluate({}, ["required"])  # type: ignore[arg-type]

    def test_configuration_error_propagates(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown rule"):
            RuleEvaluator().evaluate({"name": "x"}, {"name": "required|shiny"})

    def test_deterministic(self) -> None:
        values = {"name": "", "age": "x", "email": "nope"}
        rules = {"name": "required", "age": "numeric", "email": "email"}
        first = RuleEvaluator().evaluate(values, rules)
        second = RuleEvaluator().evaluate(values, rules)
        assert first == second
        assert list(first.errors) == ["name", "age", "email"]
