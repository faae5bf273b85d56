import logging
import re
from typing import Any

import pytest

from checkchain import CheckFailure, CheckRegistry, Checks, ConfigurationError, Context, Fail, checks
from checkchain.outcome import PASS, Outcome
from checkchain.registry import register_custom_validator


async def run_chain(chain: Checks, obj: dict[str, Any], field: str) -> Outcome:
    ctx = Context(root=obj, current=obj).descend(field)
    return await chain.validate(ctx, field)


class TestRequired:
    @pytest.mark.parametrize("value", [None, ""])
    async def test_missing_values_fail(self, value):
        outcome = await run_chain(checks().required(), {"name": value}, "name")
        assert outcome == Fail(field="name", msg="name is required")

    async def test_absent_key_fails(self):
        outcome = await run_chain(checks().required(), {}, "name")
        assert isinstance(outcome, Fail)

    @pytest.mark.parametrize("value", [0, False, "x", " ", [], {}])
    async def test_present_values_pass(self, value):
        assert await run_chain(checks().required(), {"name": value}, "name") == PASS

    async def test_custom_message(self):
        outcome = await run_chain(checks().required(msg="Please enter a name"), {}, "name")
        assert outcome == Fail(field="name", msg="Please enter a name")


class TestIsString:
    async def test_trim(self):
        obj = {"field": "  ab  "}
        assert await run_chain(checks().is_string(trim=True), obj, "field") == PASS
        assert obj["field"] == "ab"

    @pytest.mark.parametrize("case, expected", [("upper", "AB C"), ("lower", "ab c")])
    async def test_case(self, case, expected):
        obj = {"field": " aB c "}
        assert await run_chain(checks().is_string(trim=True, case=case), obj, "field") == PASS
        assert obj["field"] == expected

    async def test_none_passes_without_writing(self):
        obj: dict[str, Any] = {}
        assert await run_chain(checks().is_string(trim=True), obj, "field") == PASS
        assert "field" not in obj

    @pytest.mark.parametrize("value", [1, 1.5, True, ["a"], {"a": 1}])
    async def test_non_strings_fail(self, value):
        outcome = await run_chain(checks().is_string(), {"field": value}, "field")
        assert outcome == Fail(field="field", msg="field must be a string.")

    async def test_later_checks_see_the_mutation(self):
        seen = []

        def record(ctx, value, field, proceed):
            seen.append(value)
            return proceed()

        obj = {"field": "  Ab  "}
        await run_chain(checks().is_string(trim=True, case="lower").func(fnc=record), obj, "field")
        assert seen == ["ab"]

    def test_invalid_case(self):
        with pytest.raises(ConfigurationError):
            checks().is_string(case="title")  # type:ignore[arg-type]


class TestRegex:
    async def test_match(self):
        assert await run_chain(checks().regex(pattern=r"^\d{5}$"), {"zip": "12345"}, "zip") == PASS

    async def test_mismatch(self):
        outcome = await run_chain(checks().regex(pattern=r"^\d{5}$"), {"zip": "1234"}, "zip")
        assert outcome == Fail(field="zip", msg="zip is invalid.")

    async def test_compiled_pattern(self):
        chain = checks().regex(pattern=re.compile("^abc$", re.IGNORECASE))
        assert await run_chain(chain, {"code": "ABC"}, "code") == PASS

    async def test_non_strings_are_converted(self):
        assert await run_chain(checks().regex(pattern=r"^\d+$"), {"zip": 12345}, "zip") == PASS

    async def test_missing_value_is_matched_as_none_text(self):
        assert await run_chain(checks().regex(pattern=r"^None$"), {}, "zip") == PASS

    @pytest.mark.parametrize("pattern", [None, ""])
    def test_pattern_is_required(self, pattern):
        with pytest.raises(ConfigurationError, match="pattern is required"):
            checks().regex(pattern=pattern)

    def test_pattern_type(self):
        with pytest.raises(ConfigurationError):
            checks().regex(pattern=42)  # type:ignore[arg-type]


class TestEmail:
    @pytest.mark.parametrize("value", ["jane@example.com", "Jane.Doe@Sub.Example.org", '"jane doe"@example.com'])
    async def test_valid(self, value):
        assert await run_chain(checks().email(), {"email": value}, "email") == PASS

    @pytest.mark.parametrize("value", ["jane", "jane@", "jane@example", "jane doe@example.com", None])
    async def test_invalid(self, value):
        outcome = await run_chain(checks().email(msg="invalid e-mail"), {"email": value}, "email")
        assert outcome == Fail(field="email", msg="invalid e-mail")


class TestPassword:
    @pytest.mark.parametrize(
        "value, passes",
        [
            pytest.param("Aa1#abcd", True, id="all classes"),
            pytest.param("aaaaaaaa", False, id="lower only"),
            pytest.param("Aa1#", False, id="too short"),
            pytest.param("Aa1#" + "a" * 29, False, id="too long"),
            pytest.param("Aa1 abcd", True, id="space is special"),
            pytest.param(12345678, False, id="no string"),
        ],
    )
    async def test_default_requirements(self, value, passes):
        chain = checks().password(req=["upper", "lower", "number", "special"], min_length=8, max_length=32)
        outcome = await run_chain(chain, {"password": value}, "password")
        assert (outcome == PASS) is passes

    async def test_defaults_match_explicit_requirements(self):
        assert await run_chain(checks().password(), {"password": "Aa1#abcd"}, "password") == PASS
        assert await run_chain(checks().password(), {"password": "Aa1abcde"}, "password") != PASS

    async def test_literal_pattern(self):
        chain = checks().password(req=["number", "x"], min_length=4)
        assert await run_chain(chain, {"password": "1X23"}, "password") == PASS
        assert await run_chain(chain, {"password": "1234"}, "password") == Fail(
            field="password", msg="password is invalid."
        )

    async def test_non_positive_lengths_fall_back_to_defaults(self):
        chain = checks().password(req=["lower"], min_length=0, max_length=-1)
        assert await run_chain(chain, {"password": "abcdefg"}, "password") != PASS
        assert await run_chain(chain, {"password": "abcdefgh"}, "password") == PASS

    def test_req_must_be_a_list(self):
        with pytest.raises(ConfigurationError, match="req must be a list"):
            checks().password(req="upper")  # type:ignore[arg-type]


class TestSameAs:
    async def test_root_path(self):
        chain = checks().same_as(path="$/password")
        obj = {"password": "Aa1#abcd", "repeatPassword": "Aa1#abcd"}
        assert await run_chain(chain, obj, "repeatPassword") == PASS

    async def test_mismatch(self):
        chain = checks().same_as(path="$/password")
        obj = {"password": "Aa1#abcd", "repeatPassword": "Aa1#abce"}
        outcome = await run_chain(chain, obj, "repeatPassword")
        assert outcome == Fail(field="repeatPassword", msg="repeatPassword is not same as $/password")

    async def test_both_absent(self):
        assert await run_chain(checks().same_as(path="$/password"), {}, "repeatPassword") == PASS

    async def test_only_one_absent(self):
        chain = checks().same_as(path="$/password")
        assert await run_chain(chain, {"password": "a"}, "repeatPassword") != PASS
        assert await run_chain(chain, {"repeatPassword": "a"}, "repeatPassword") != PASS

    async def test_nested_relative_path(self):
        chain = checks().same_as(path="account/email")
        obj = {"account": {"email": "jane@example.com"}, "contact": "jane@example.com"}
        assert await run_chain(chain, obj, "contact") == PASS

    async def test_missing_intermediate_is_absent(self):
        chain = checks().same_as(path="account/email")
        assert await run_chain(chain, {"account": None}, "contact") == PASS

    def test_path_is_required(self):
        with pytest.raises(ConfigurationError):
            checks().same_as()


class TestFunc:
    async def test_sync_function(self):
        def is_even(ctx, value, field, proceed):
            return proceed() if value % 2 == 0 else f"{ctx.path} must be even"

        assert await run_chain(checks().func(fnc=is_even), {"n": 2}, "n") == PASS
        assert await run_chain(checks().func(fnc=is_even), {"n": 3}, "n") == Fail(field="n", msg="n must be even")

    async def test_async_function(self):
        async def is_free(ctx, value, field, proceed):
            return value != "taken" or "already taken"

        assert await run_chain(checks().func(fnc=is_free), {"user": "free"}, "user") == PASS
        assert await run_chain(checks().func(fnc=is_free), {"user": "taken"}, "user") == Fail(
            field="user", msg="already taken"
        )

    async def test_raised_check_failure(self):
        def fail(ctx, value, field, proceed):
            raise CheckFailure("nope")

        assert await run_chain(checks().func(fnc=fail), {}, "x") == Fail(field="x", msg="nope")

    async def test_returned_exception(self):
        def fail(ctx, value, field, proceed):
            return ValueError("bad value")

        assert await run_chain(checks().func(fnc=fail), {}, "x") == Fail(field="x", msg="bad value")

    def test_fnc_is_required(self):
        with pytest.raises(ConfigurationError):
            checks().func()


class TestCustom:
    async def test_registered_factory(self):
        registry = CheckRegistry()

        def min_value(options):
            def check(ctx, value, field, proceed):
                return proceed() if value >= options["min"] else f"{ctx.path} is too small"

            return check

        registry.register("min_value", min_value)
        chain = checks(registry).custom("min_value", {"min": 18})
        assert len(chain) == 1
        assert await run_chain(chain, {"age": 18}, "age") == PASS
        assert await run_chain(chain, {"age": 17}, "age") == Fail(field="age", msg="age is too small")

    async def test_default_registry(self):
        register_custom_validator("always_fails_for_test", lambda options: lambda ctx, value, field, proceed: False)
        chain = checks().custom("always_fails_for_test")
        assert await run_chain(chain, {}, "x") == Fail(field="x", msg="")

    async def test_last_registration_wins(self):
        registry = CheckRegistry()
        registry.register("check", lambda options: lambda ctx, value, field, proceed: "first")
        registry.register("check", lambda options: lambda ctx, value, field, proceed: "second")
        assert registry.names == frozenset({"check"})
        assert await run_chain(checks(registry).custom("check"), {}, "x") == Fail(field="x", msg="second")

    async def test_missing_validator_is_skipped(self, caplog):
        registry = CheckRegistry()
        with caplog.at_level(logging.WARNING):
            chain = checks(registry).required().custom("missing").is_string()
        assert "No custom validator found with name missing." in caplog.text
        assert len(chain) == 2
        assert await run_chain(chain, {"x": "value"}, "x") == PASS


class TestSameAsStrictEquality:
    @pytest.mark.parametrize("other, value", [(True, 1), (1, 1.0), (0, False), ("1", 1)])
    async def test_different_types_are_not_same(self, other, value):
        outcome = await run_chain(checks().same_as(path="$/a"), {"a": other, "b": value}, "b")
        assert outcome == Fail(field="b", msg="b is not same as $/a")

    @pytest.mark.parametrize("value", [1, 1.5, True, "x", ("a", 1)])
    async def test_equal_values_of_same_type(self, value):
        assert await run_chain(checks().same_as(path="$/a"), {"a": value, "b": value}, "b") == PASS


class TestPasswordOptions:
    @pytest.mark.parametrize("req", [["upper", 5], ("lower", None), ["number", "special", b"x"]])
    def test_every_requirement_must_be_a_string(self, req):
        with pytest.raises(ConfigurationError, match="req must be a list"):
            checks().password(req=req)
