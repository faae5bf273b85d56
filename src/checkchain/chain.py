"""
Contains the `Checks` class - an ordered chain of checks for a single field.

Each check is called with the run context, the current value of the field, the field name and a `proceed`
continuation. A check either returns `proceed()` to hand over to the next check, or returns a terminal result
(`True`, `False`, a message string, an exception or an awaitable resolving to one of those).
"""
import logging
import re
from typing import Any, Literal, Optional

from typeguard import CollectionCheckStrategy, TypeCheckError, check_type

from .context import Context
from .errors import CheckFailure, ConfigurationError
from .outcome import PASS, Outcome, normalize_result
from .registry import CheckRegistry, default_registry
from .types import CheckFunction, Proceed
from .utils.query_object import optional_field, split_path

logger = logging.getLogger(__name__)

# src: http://emailregex.com/
EMAIL_PATTERN = re.compile(
    r"^(([^<>()\[\]\\.,;:\s@\"]+(\.[^<>()\[\]\\.,;:\s@\"]+)*)|(\".+\"))@"
    r"((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$",
    re.IGNORECASE,
)

PASSWORD_CHARSETS: dict[str, re.Pattern[str]] = {
    "upper": re.compile(r"[A-Z]+"),
    "lower": re.compile(r"[a-z]+"),
    "number": re.compile(r"[0-9]+"),
    "special": re.compile(r"[ !\"#$%&'()*+,\-./:;<=>?@\[\\\]^_`{|}~]+"),
}


def _require_option(option: Any, msg: str) -> None:
    if not option:
        raise ConfigurationError(msg)


def _check_option(value: Any, expected_type: Any, name: str) -> None:
    try:
        check_type(value, expected_type, collection_check_strategy=CollectionCheckStrategy.ALL_ITEMS)
    except TypeCheckError as error:
        raise ConfigurationError(f"{name}: {error}") from error


class Checks:
    """
    A chain of checks for a single field. All methods append a check and return the same instance, so chains are
    built fluently:
    ```
    schema = {
        "email": checks().required().is_string(trim=True, case="lower").email(),
        "password": checks().required().password(),
        "repeat_password": checks().same_as(path="$/password"),
    }
    ```
    A chain holds no state of a single validation. It can be shared between fields and validated concurrently.
    """

    def __init__(self, registry: Optional[CheckRegistry] = None):
        self._checks: list[CheckFunction] = []
        self._registry = registry if registry is not None else default_registry

    @property
    def registry(self) -> CheckRegistry:
        """The registry `custom` looks up its factories in"""
        return self._registry

    def __len__(self) -> int:
        return len(self._checks)

    def __repr__(self) -> str:
        return f"Checks({', '.join(getattr(check, '__name__', repr(check)) for check in self._checks)})"

    def add(self, check: CheckFunction) -> "Checks":
        """Appends an arbitrary check function to the chain"""
        if not callable(check):
            raise ConfigurationError(f"{check!r} is not callable")
        self._checks.append(check)
        return self

    def _run(self, ctx: Context, field: str) -> Any:
        """
        Starts the chain and returns the raw result of the first check.
        Every check gets its own continuation which may be called at most once.
        """
        chain = tuple(self._checks)

        def step(index: int) -> Any:
            if index >= len(chain):
                return True
            called = False

            def proceed() -> Any:
                nonlocal called
                if called:
                    raise RuntimeError(f"{ctx.path}: check #{index} called proceed more than once")
                called = True
                return step(index + 1)

            return chain[index](ctx, ctx.read(field), field, proceed)

        return step(0)

    async def validate(self, ctx: Context, field: str) -> Outcome:
        """
        Runs the chain against `field` of `ctx.current` and returns its outcome once it settled.
        Validation failures end up in the returned `Fail`; any other exception raised by a check propagates.
        """
        if not self._checks:
            return PASS
        try:
            result = self._run(ctx, field)
        except CheckFailure as failure:
            result = failure
        return await normalize_result(result, ctx.path)

    def func(self, fnc: Optional[CheckFunction] = None) -> "Checks":
        """
        Adds an arbitrary check function. It may be synchronous or asynchronous and is called like every built-in
        check: `fnc(ctx, value, field, proceed)`.
        """
        _require_option(fnc, "validation option fnc is required.")
        assert fnc is not None
        return self.add(fnc)

    def required(self, msg: Optional[str] = None) -> "Checks":
        """Fails if the value is `None` or an empty string"""

        def required(ctx: Context, value: Any, field: str, proceed: Proceed) -> Any:
            if value is None or (isinstance(value, str) and value == ""):
                return msg or f"{ctx.path} is required"
            return proceed()

        return self.add(required)

    def is_string(
        self,
        trim: bool = False,
        case: Optional[Literal["upper", "lower"]] = None,
        msg: Optional[str] = None,
    ) -> "Checks":
        """
        Fails if the value is neither a string nor `None`. Strings get trimmed and case folded as configured and are
        written back into the validated object before the next check runs.
        """
        _check_option(case, Optional[Literal["upper", "lower"]], "case")

        def is_string(ctx: Context, value: Any, field: str, proceed: Proceed) -> Any:
            if value is None:
                return proceed()
            if not isinstance(value, str):
                return msg or f"{ctx.path} must be a string."
            if trim:
                value = value.strip()
            if case == "upper":
                value = value.upper()
            elif case == "lower":
                value = value.lower()
            ctx.write(field, value)
            return proceed()

        return self.add(is_string)

    def regex(self, pattern: "Optional[str | re.Pattern[str]]" = None, msg: Optional[str] = None) -> "Checks":
        """
        Proceeds if `pattern` is found in the value. Non string values are converted with `str` before matching, so
        a missing value is matched as the text "None".
        """
        _require_option(pattern, "pattern is required.")
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        _check_option(compiled, re.Pattern, "pattern")
        assert compiled is not None

        def regex(ctx: Context, value: Any, field: str, proceed: Proceed) -> Any:
            if compiled.search(str(value)):
                return proceed()
            return msg or f"{ctx.path} is invalid."

        return self.add(regex)

    def email(self, msg: Optional[str] = None) -> "Checks":
        """Proceeds if the value looks like an e-mail address"""
        return self.regex(pattern=EMAIL_PATTERN, msg=msg)

    def password(
        self,
        req: Optional[list[str] | tuple[str, ...]] = None,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
        msg: Optional[str] = None,
    ) -> "Checks":
        """
        Proceeds if the value is a string with a length between `min_length` (default 8) and `max_length`
        (default 32) containing at least one character of every class in `req`. Known classes are
        "upper", "lower", "number" and "special" (default: all of them); any other entry is used as a case
        insensitive regular expression.
        """
        if req is None:
            req = ["upper", "lower", "number", "special"]
        _check_option(req, list[str] | tuple[str, ...], "req must be a list")
        charsets = [PASSWORD_CHARSETS.get(entry) or re.compile(entry, re.IGNORECASE) for entry in req]
        minimum = min_length if min_length and min_length > 0 else 8
        maximum = max_length if max_length and max_length > 0 else 32

        def password(ctx: Context, value: Any, field: str, proceed: Proceed) -> Any:
            invalid = msg or f"{ctx.path} is invalid."
            if not isinstance(value, str):
                return invalid
            if not minimum <= len(value) <= maximum:
                return invalid
            for charset in charsets:
                if not charset.search(value):
                    return invalid
            return proceed()

        return self.add(password)

    def same_as(self, path: Optional[str] = None, msg: Optional[str] = None) -> "Checks":
        """
        Proceeds if the value equals the value found at the slash delimited `path` and both have the same type
        (`1`, `1.0` and `True` differ). The path is resolved relative to `ctx.current` or, if it starts with `$/`,
        relative to `ctx.root`. Missing values on both sides are considered equal.
        Unknown keys are removed before any check runs, so the referenced field has to be declared in the schema
        (e.g. with a `None` entry) unless `trim_unknown` is disabled.
        """
        _require_option(path, "validation field is required.")
        assert path is not None
        from_root, segments = split_path(path)
        relative_path = "/".join(segments)

        def same_as(ctx: Context, value: Any, field: str, proceed: Proceed) -> Any:
            other = optional_field(ctx.root if from_root else ctx.current, relative_path, Any)
            if value is None and other is None:
                return proceed()
            if type(value) is type(other) and value == other:
                return proceed()
            return msg or f"{ctx.path} is not same as {path}"

        return self.add(same_as)

    def custom(self, name: str, options: Any = None) -> "Checks":
        """
        Adds the check created by the factory registered under `name`. If there is no such factory a warning is
        logged and the chain stays unchanged.
        """
        factory = self._registry.get(name)
        if factory is None:
            logger.warning("No custom validator found with name %s.", name)
            return self
        return self.add(factory(options))


def checks(registry: Optional[CheckRegistry] = None) -> Checks:
    """Returns a new, empty chain"""
    return Checks(registry)
