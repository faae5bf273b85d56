"""
Contains the canonical outcome of a check chain and the function which converts the raw return values of checks
into it.
"""
import inspect
from dataclasses import dataclass
from typing import Any, TypeAlias

from .errors import CheckFailure


@dataclass(frozen=True)
class Pass:
    """The field passed all its checks"""


@dataclass(frozen=True)
class Fail:
    """
    The field failed one of its checks. `field` is the path of the field inside the validated object and `msg` is
    the message of the failing check (may be empty if the check returned `False`).
    """

    field: str
    msg: str = ""

    def to_dict(self) -> dict[str, str]:
        """Returns a JSON serializable representation"""
        return {"field": self.field, "msg": self.msg}


PASS = Pass()
Outcome: TypeAlias = Pass | Fail


async def normalize_result(result: Any, field: str) -> Outcome:
    """
    Converts the raw return value of a check into an `Outcome`.
    Awaitables are awaited (repeatedly, if they resolve to another awaitable) and the settled value is converted:

    - `True` -> `Pass`
    - `False` -> `Fail` with empty message
    - `str` -> `Fail` with the string as message
    - exception instance -> `Fail` with the exception message
    - `Pass` / `Fail` -> as is

    A `CheckFailure` raised while awaiting is converted like a returned exception. Every other exception propagates.
    Any other type violates the check contract and raises a TypeError.
    """
    while inspect.isawaitable(result):
        try:
            result = await result
        except CheckFailure as failure:
            result = failure
    if isinstance(result, (Pass, Fail)):
        return result
    if isinstance(result, bool):
        return PASS if result else Fail(field=field)
    if isinstance(result, str):
        return Fail(field=field, msg=result)
    if isinstance(result, CheckFailure):
        return Fail(field=field, msg=result.msg)
    if isinstance(result, Exception):
        return Fail(field=field, msg=str(result))
    raise TypeError(f"{field}: Checks must not return values of type {type(result).__name__}")
