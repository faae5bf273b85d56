"""
Contains an adapter which validates the body of web requests before they reach the request handler.
The adapter doesn't depend on a web framework: requests need a settable `body` attribute and responses have to
implement `ResponseLike`.
"""
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

from .analysis import ValidationResult
from .config import ValidatorConfig
from .context import Context
from .execution import ValidationManager
from .registry import CheckRegistry
from .types import SchemaT

logger = logging.getLogger(__name__)


class ResponseLike(Protocol):
    """
    A protocol that defines how the middleware answers a request by itself.
    """

    def send(self, status_code: int, payload: Any) -> Any:
        ...


OnRequestSuccess = Callable[[Any, ResponseLike, Callable[[], Any], ValidationResult, Context], Any]
OnRequestError = Callable[[Any, ResponseLike, Callable[[], Any], BaseException, Context], Any]
RequestMiddleware = Callable[[Any, ResponseLike, Callable[[], Any]], Awaitable[None]]


async def _settle(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def default_on_success(
    request: Any, response: ResponseLike, next_: Callable[[], Any], result: ValidationResult, ctx: Context
) -> None:
    """
    Replaces the request body by the validated (and possibly trimmed) object and calls `next_` if the validation
    succeeded. Otherwise the request is answered with status 400 and the error map.
    """
    if result.success:
        request.body = ctx.root
        await _settle(next_())
        return
    await _settle(response.send(400, result.to_dict()["errors"]))


async def default_on_error(
    request: Any, response: ResponseLike, next_: Callable[[], Any], error: BaseException, ctx: Context
) -> None:
    """
    Answers the request with status 500. Used if the validation itself broke.
    """
    # pylint: disable=unused-argument
    logger.error("Validation of request body failed unexpectedly", exc_info=error)
    await _settle(response.send(500, {"error": "Internal validation error"}))


def new_request_body_validator(
    schema: Optional[SchemaT],
    on_success: Optional[OnRequestSuccess] = None,
    on_error: Optional[OnRequestError] = None,
    config: Optional[ValidatorConfig] = None,
    registry: Optional[CheckRegistry] = None,
) -> RequestMiddleware:
    """
    Returns a middleware validating `request.body` against `schema`. A missing body is replaced by an empty dict.
    Exactly one of `on_success` (validation finished, successful or not) and `on_error` (validation broke) gets
    called per request. Both callbacks may be synchronous or asynchronous.
    """
    manager = ValidationManager(schema, config, registry)
    success_callback = on_success or default_on_success
    error_callback = on_error or default_on_error

    async def middleware(request: Any, response: ResponseLike, next_: Callable[[], Any]) -> None:
        if getattr(request, "body", None) is None:
            request.body = {}
        ctx = Context(root=request.body, current=request.body, request=request, response=response)
        try:
            result = await manager.run(ctx)
        except Exception as error:  # pylint: disable=broad-except
            await _settle(error_callback(request, response, next_, error, ctx))
            return
        await _settle(success_callback(request, response, next_, result, ctx))

    return middleware
