"""
Contains the `ValidationManager` which validates whole objects against a schema by running the chains of all
declared fields concurrently.
"""
import asyncio
import logging
from typing import Any, Coroutine, Mapping, MutableMapping, Optional

from frozendict import frozendict

from .analysis import ValidationResult
from .chain import Checks
from .config import ValidatorConfig
from .context import Context
from .errors import ConfigurationError, ValidationRunError
from .outcome import Fail, Outcome
from .registry import CheckRegistry
from .types import SchemaT

logger = logging.getLogger(__name__)


def _freeze_schema(schema: SchemaT, registry: Optional[CheckRegistry]) -> frozendict[str, Optional[Checks]]:
    if not isinstance(schema, Mapping):
        raise ConfigurationError(f"Schema must be a mapping, got {type(schema).__name__}")
    for field, entry in schema.items():
        if entry is None:
            continue
        if isinstance(entry, Checks):
            if registry is not None and entry.registry is not registry:
                raise ConfigurationError(f"{field}: Checks were built with another registry")
            continue
        if isinstance(entry, (Mapping, list, tuple)):
            raise NotImplementedError(f"{field}: Nested schemas are not supported")
        raise ConfigurationError(f"{field}: Expected Checks, got {type(entry).__name__}")
    return frozendict(schema)


class ValidationManager:
    """
    Validates objects against a schema, i.e. a mapping of field names onto `Checks`.
    The chains of all fields run concurrently; the result is returned once all of them settled. Checks which write
    to the validated object (e.g. trimming) must not write to fields of other chains - this isn't enforced.
    The schema is not changed by validation, so a manager can be used for any number of (concurrent) runs.
    If a `registry` is given, all chains of the schema must have been built with it.
    """

    def __init__(
        self,
        schema: Optional[SchemaT],
        config: Optional[ValidatorConfig] = None,
        registry: Optional[CheckRegistry] = None,
    ):
        if schema is None:
            raise ConfigurationError("Schema is required")
        self.registry = registry
        self.schema = _freeze_schema(schema, registry)
        self.config = config if config is not None else ValidatorConfig()

    def validate(self, obj: Any) -> Coroutine[Any, Any, ValidationResult]:
        """
        Validates `obj` and returns a coroutine resolving to the `ValidationResult`. Unknown keys get removed from
        `obj` if `trim_unknown` is configured. Raises a ConfigurationError immediately if `obj` is `None`.
        If a chain raised an unexpected exception awaiting the coroutine raises a `ValidationRunError`.
        """
        if obj is None:
            raise ConfigurationError("Value is required")
        return self.run(Context(root=obj, current=obj))

    async def run(self, ctx: Context) -> ValidationResult:
        """
        Validates `ctx.current` and fills `ctx.errors`. Use this if you need to prepare the context yourself.
        """
        logger.debug("Validating %d field(s) of %s", len(self.schema), ctx.path or "root")
        tasks: dict[str, asyncio.Task[Outcome]] = {}
        for field, field_checks in self.schema.items():
            if field_checks is None:
                continue
            tasks[field] = asyncio.create_task(self._validate_field(field_checks, ctx.descend(field), field))
        if self.config.trim_unknown:
            self._trim_unknown(ctx.current)

        outcomes = await asyncio.gather(*tasks.values(), return_exceptions=True)

        faults: dict[str, BaseException] = {}
        for field, outcome in zip(tasks, outcomes):
            if isinstance(outcome, BaseException):
                faults[field] = outcome
            elif isinstance(outcome, Fail):
                ctx.errors[field] = outcome
        if faults:
            for field, fault in faults.items():
                logger.error("Check chain of %s raised %r", field, fault)
            raise ValidationRunError(faults) from next(iter(faults.values()))
        logger.debug("Validation finished with %d error(s)", len(ctx.errors))
        return ValidationResult(ctx.errors)

    async def _validate_field(self, field_checks: Checks, ctx: Context, field: str) -> Outcome:
        if self.config.timeout is None:
            return await field_checks.validate(ctx, field)
        deadline = asyncio.timeout(self.config.timeout)
        try:
            async with deadline:
                return await field_checks.validate(ctx, field)
        except TimeoutError:
            if not deadline.expired():
                raise
            logger.warning("Check chain of %s timed out after %ss", ctx.path, self.config.timeout)
            return Fail(field=ctx.path, msg=f"{ctx.path} timed out.")

    def _trim_unknown(self, obj: Any) -> None:
        if not isinstance(obj, MutableMapping):
            return
        unknown_keys = [key for key in obj if key not in self.schema]
        for key in unknown_keys:
            del obj[key]
        if unknown_keys:
            logger.debug("Removed unknown key(s) %s", unknown_keys)


def new_object_validator(
    schema: Optional[SchemaT], config: Optional[ValidatorConfig] = None, registry: Optional[CheckRegistry] = None
):
    """
    Returns a function which validates objects against `schema`. Calling it returns a coroutine resolving to a
    `ValidationResult`.
    """
    return ValidationManager(schema, config, registry).validate
